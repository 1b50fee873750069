#!/usr/bin/env python3
"""
TermLens REST API Server
Provides HTTP endpoints so a browser editing surface can use the TermLens engine
"""

import logging
import os

from flask import Flask, request, jsonify
from flask_cors import CORS

from .core.caret import CaretPosition
from .core.config import TermLensConfig, default_config
from .core.editor import EditorSession
from .core.glossary import TermCatalog

logger = logging.getLogger(__name__)

app = Flask(__name__)
CORS(app)  # Enable CORS for the editor frontend

# Global components (initialized once)
config = None
catalog = None


def initialize_components(custom_config: TermLensConfig = None, custom_catalog: TermCatalog = None) -> bool:
    """Initialize TermLens components"""
    global config, catalog

    try:
        config = custom_config or default_config
        if custom_catalog is not None:
            catalog = custom_catalog
        elif config.glossary_path:
            catalog = TermCatalog.from_file(config.glossary_path)
        else:
            catalog = TermCatalog()

        logger.info(f"TermLens API server ready with {len(catalog)} glossary terms")
        return True

    except ValueError as e:
        logger.error(f"Failed to initialize TermLens: {e}")
        return False


def _session() -> EditorSession:
    if catalog is None:
        initialize_components()
    return EditorSession(catalog=catalog, config=config)


def _parse_selection(data):
    selection = data.get('selection')
    if selection is None:
        return None
    if not isinstance(selection, dict):
        raise ValueError("selection must be an object with start and end")
    start = int(selection.get('start', 0))
    end = int(selection.get('end', start))
    return CaretPosition(start=min(start, end), end=max(start, end), backward=end < start)


@app.route('/health', methods=['GET'])
def health_check():
    """Health check endpoint"""
    return jsonify({"status": "healthy", "message": "TermLens API is running"})


@app.route('/api/annotate', methods=['POST'])
def annotate():
    """Run one rescan cycle over posted note content"""
    data = request.get_json(silent=True) or {}
    content = data.get('content')

    if not isinstance(content, str):
        return jsonify({"error": "No content provided"}), 400

    try:
        selection = _parse_selection(data)
    except (TypeError, ValueError) as e:
        return jsonify({"error": str(e)}), 400

    try:
        session = _session()
        session.open(content, scan=False)
        session.set_selection(selection)
        session.rescan()

        caret = session.caret
        return jsonify({
            "content": session.content,
            "annotated_content": session.annotated_content,
            "plain_text": session.plain_text,
            "occurrences": [
                {
                    "term": occurrence.term,
                    "start": occurrence.start,
                    "end": occurrence.end,
                    "classification": session.detector.classify(occurrence.term),
                }
                for occurrence in session.occurrences
            ],
            "selection": {"start": caret.start, "end": caret.end} if caret else None,
        })

    except Exception as e:
        logger.exception("Annotate failed")
        return jsonify({"error": f"Failed to annotate content: {e}"}), 500


@app.route('/api/define/<path:term>', methods=['GET'])
def define(term):
    """Resolve a term the way the hover popup does"""
    session = _session()
    definition, classification = session.hover.describe(term)
    return jsonify({
        "term": term,
        "definition": definition,
        "classification": classification,
    })


@app.route('/api/glossary', methods=['GET'])
def glossary():
    """Export the glossary"""
    export_format = request.args.get('format', 'json')
    session = _session()

    if export_format == 'json':
        return jsonify(dict(sorted(session.catalog.items())))

    try:
        exported = session.catalog.export_glossary(export_format)
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    return exported, 200, {"Content-Type": "text/plain; charset=utf-8"}


@app.route('/api/glossary/search', methods=['GET'])
def search_glossary():
    """Search glossary terms and definitions"""
    query = request.args.get('q', '')
    if not query.strip():
        return jsonify({"error": "No query provided"}), 400

    results = _session().catalog.search_terms(query)
    return jsonify({
        "results": [{"term": term, "definition": definition} for term, definition in results]
    })


def main():
    logging.basicConfig(level=logging.INFO)
    if not initialize_components():
        raise SystemExit(1)

    port = int(os.getenv("TERMLENS_PORT", "5000"))
    app.run(host="0.0.0.0", port=port, debug=False)


if __name__ == '__main__':
    main()
