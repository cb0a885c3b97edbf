"""Simple Flask JSON API over the PBIR explorer."""

import os

from flask import Flask, jsonify, request

from pbir_explorer.domain.models import ResolveOptions
from pbir_explorer.host import JSONFileLastFolderStore, LastFolderStore, StaticFolderPicker, open_project
from pbir_explorer.output.json_dumper import JSONDumper
from pbir_explorer.resolution.project_index import ProjectIndex
from pbir_explorer.run_context import ResolutionInterrupted


def create_app(store: LastFolderStore | None = None, options: ResolveOptions | None = None) -> Flask:
    app = Flask(__name__)
    state = store or JSONFileLastFolderStore()
    index = ProjectIndex(options)

    def _folder_arg():
        folder = request.args.get('path') or state.get()
        if not folder:
            return None, (jsonify({'error': 'No folder path provided'}), 400)
        if not os.path.isdir(folder):
            return None, (jsonify({'error': f'Folder not found: {folder}'}), 404)
        return folder, None

    @app.route('/api/overview')
    def overview():
        """Bookmarks grouped by target page."""
        folder, error = _folder_arg()
        if error:
            return error
        try:
            result = open_project(StaticFolderPicker(folder), state, index)
        except ResolutionInterrupted as e:
            return jsonify({'error': str(e)}), 503
        if not result.found:
            return jsonify({'error': 'No bookmarks file found', 'path': folder}), 404
        return jsonify(JSONDumper.overview_to_dict(result))

    @app.route('/api/bookmarks/<bookmark_id>')
    def bookmark_page(bookmark_id: str):
        """Visual hierarchy of the page a bookmark targets."""
        folder, error = _folder_arg()
        if error:
            return error
        try:
            result = index.build_overview(folder)
            if not result.found:
                return jsonify({'error': 'No bookmarks file found', 'path': folder}), 404
            if bookmark_id not in result.bookmarks:
                return jsonify({'error': f'Bookmark not found: {bookmark_id}'}), 404
            detail = index.page_detail(result, bookmark_id)
        except ResolutionInterrupted as e:
            return jsonify({'error': str(e)}), 503
        return jsonify(JSONDumper.page_detail_to_dict(detail))

    @app.route('/api/last-folder', methods=['GET'])
    def get_last_folder():
        return jsonify({'path': state.get()})

    @app.route('/api/last-folder', methods=['PUT'])
    def set_last_folder():
        payload = request.get_json(silent=True) or {}
        path = payload.get('path')
        if not isinstance(path, str) or not path:
            return jsonify({'error': 'No folder path provided'}), 400
        state.set(path)
        return jsonify({'path': path})

    return app


if __name__ == '__main__':
    create_app().run(debug=True, port=5002)
