import base64
import binascii
import os
import re

from flask import Blueprint, current_app, jsonify, request

uploads = Blueprint('uploads', __name__)

DATA_URI_RE = re.compile(r'^data:(.+);base64,(.*)$', re.DOTALL)
UNSAFE_NAME_RE = re.compile(r'[^a-z0-9_\-.]', re.IGNORECASE)


def safe_filename(name) -> str:
    cleaned = UNSAFE_NAME_RE.sub('_', name if isinstance(name, str) and name else 'upload')
    # Never let a name resolve to the folder itself or its parent
    if cleaned.strip('.') == '':
        cleaned = 'upload'
    return cleaned


def decode_data_uri(data_uri):
    """Return the raw bytes of a base64 data URI, or None if it is not one."""
    if not isinstance(data_uri, str):
        return None
    match = DATA_URI_RE.match(data_uri)
    if not match:
        return None
    return base64.b64decode(match.group(2), validate=False)


@uploads.route('/upload', methods=['POST'])
def upload_images():
    """Store base64 encoded images for use as round images.

    Expects ``{"files": [{"name": ..., "dataUrl": "data:image/png;base64,..."}]}``.
    Entries without a valid data URI are skipped.
    """
    data = request.get_json(silent=True) or {}
    files = data.get('files')
    if not isinstance(files, list) or not files:
        return jsonify({'error': 'No files'}), 400

    folder = current_app.config['UPLOAD_FOLDER']
    saved = []
    try:
        os.makedirs(folder, exist_ok=True)
        for entry in files:
            if not isinstance(entry, dict):
                continue
            name = safe_filename(entry.get('name'))
            payload = decode_data_uri(entry.get('dataUrl'))
            if payload is None:
                continue
            with open(os.path.join(folder, name), 'wb') as fh:
                fh.write(payload)
            saved.append('/uploads/' + name)
    except (OSError, binascii.Error, ValueError) as exc:
        current_app.logger.exception(f"[upload-error] {exc}")
        return jsonify({'error': str(exc)}), 500

    current_app.logger.info(f"[upload] saved={len(saved)} skipped={len(files) - len(saved)}")
    return jsonify({'ok': True, 'urls': saved})
