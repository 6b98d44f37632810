# MP3 Auto Tagger - AI-assisted MP3 metadata tagger
# Copyright (C) 2025 Dr. William Nelson Leonard
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

from flask import Flask, jsonify, request, send_from_directory
import os
from datetime import datetime
from functools import partial

from config import PORT, HOST, STATIC_DIR, MAX_CONTENT_LENGTH, logger

from core.errors import TaggerError, ValidationError
from core.storage import get_storage_provider
from core.file_utils import is_mp3_upload, upload_filename
from core.file_operations import FileOperationExecutor
from core.batch.processor import BatchCoordinator
from core.inference import analysis_engine
from core.album_art.loader import load_cover_image
from core.album_art.generator import generate_cover_art, keyword_text
from core.metadata.tag_mapper import build_tag_set
from core.metadata.exporter import save_export_json
from core.naming.template import NAMING_TEMPLATES, render, resolve_template

app = Flask(__name__, static_folder=None)
app.config['MAX_CONTENT_LENGTH'] = MAX_CONTENT_LENGTH

storage = None
executor = None
batch_coordinator = None


def configure_storage(provider=None):
    """(Re)bind the storage provider and the executors working inside it"""
    global storage, executor, batch_coordinator
    storage = provider or get_storage_provider()
    executor = FileOperationExecutor(storage.uploads_dir)
    batch_coordinator = BatchCoordinator(executor)
    return storage


configure_storage()


@app.after_request
def add_cache_headers(response):
    """Keep reverse proxies from caching API answers"""
    if response.mimetype == 'application/json':
        response.headers['Cache-Control'] = 'no-store, no-cache, must-revalidate, private'
        response.headers['Pragma'] = 'no-cache'
        response.headers['Expires'] = '0'
    return response


def error_response(error, status_code=None):
    """JSON error body in the shape the front end expects"""
    status = status_code or getattr(error, 'status_code', 500)
    return jsonify({'success': False, 'error': str(error) or type(error).__name__}), status


def request_data():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    return data


def batch_response(batch, key='results'):
    return jsonify({
        'success': True,
        key: batch.results,
        'errors': batch.errors,
        'logs': batch.logs()
    })

# =============
# API ENDPOINTS
# =============

@app.route('/api/status')
def status():
    return jsonify({
        'status': 'ok',
        'deployTarget': storage.name,
        'uploadsDir': storage.uploads_dir
    })

@app.route('/api/upload', methods=['POST'])
def upload_files():
    """Store uploaded MP3 files and analyze each one"""
    try:
        uploads = [f for f in request.files.getlist('files') if f and f.filename]
        if not uploads:
            return error_response(ValidationError('No files uploaded'))

        rejected = [f.filename for f in uploads if not is_mp3_upload(f.filename, f.mimetype)]
        if rejected:
            logger.error(f"Rejected non-MP3 uploads: {rejected}")
            return error_response(ValidationError('Only MP3 files are allowed'))

        logger.info(f"Processing {len(uploads)} uploaded MP3 file(s)")
        results = []
        for upload in uploads:
            file_path = os.path.join(storage.uploads_dir, upload_filename(upload.filename))
            upload.save(file_path)
            stats = os.stat(file_path)

            logger.info(f"Analyzing {upload.filename}")
            analysis = analysis_engine.analyze(file_path)
            logger.info(f"Analysis finished for {upload.filename}: genre {analysis.get('genre')}, "
                        f"subgenre {analysis.get('subgenre')}")

            results.append({
                'id': os.path.basename(file_path),
                'originalName': upload.filename,
                'path': file_path,
                'size': stats.st_size,
                'duration': 0,
                'createdAt': datetime.fromtimestamp(stats.st_mtime).isoformat(),
                'analysis': analysis
            })

        return jsonify({
            'success': True,
            'files': results,
            'logs': {
                'message': f"{len(results)} file(s) analyzed successfully",
                'details': [f.filename for f in uploads]
            }
        })

    except Exception as e:
        logger.error(f"Error processing upload: {e}")
        return error_response(e, 500)

@app.route('/api/write-tags', methods=['POST'])
def write_tags():
    """Write ID3 tags for one file"""
    try:
        data = request_data()
        file_path = data.get('filePath')
        metadata = data.get('metadata')
        if not file_path or not metadata:
            raise ValidationError('File path and metadata are required')

        if not executor.exists(file_path):
            logger.error(f"File not found for tag writing: {file_path}")
            return error_response(TaggerError('File not found'), 404)

        tag_set = build_tag_set(
            metadata,
            single_file=True,
            image_loader=partial(load_cover_image, base_dir=executor.base_dir)
        )
        logger.info(f"Writing tags to {os.path.basename(file_path)}: {tag_set.summary()}")
        executor.write_tags(file_path, tag_set)

        return jsonify({
            'success': True,
            'logs': {
                'message': 'ID3 tags written successfully',
                'details': f"File: {os.path.basename(file_path)}\nTitle: {tag_set.title}\n"
                           f"Genre: {tag_set.genre}\nCover: {'yes' if tag_set.image else 'no'}"
            }
        })

    except TaggerError as e:
        logger.error(f"Error writing tags: {e}")
        return error_response(e)
    except Exception as e:
        logger.error(f"Error writing tags: {e}")
        return error_response(e, 500)

@app.route('/api/write-batch-tags', methods=['POST'])
def write_batch_tags():
    """Write ID3 tags for several files"""
    try:
        batch = batch_coordinator.write_tags_batch(request_data().get('files'))
        return batch_response(batch)
    except ValidationError as e:
        return error_response(e, 400)
    except Exception as e:
        logger.error(f"Error in batch tag writing: {e}")
        return error_response(e, 500)

@app.route('/api/rename', methods=['POST'])
def rename_file():
    """Rename one file, from an explicit name or a naming template"""
    try:
        data = request_data()
        file_path = data.get('filePath')
        options = data.get('options') or {}

        if options.get('useTemplate') and options.get('template'):
            new_name = render(resolve_template(options['template']), data.get('metadata') or {})
        else:
            new_name = data.get('newName')

        if not file_path or not new_name:
            raise ValidationError('File path or new name not specified')

        outcome = executor.rename_file(file_path, new_name)

        return jsonify({
            'success': True,
            **outcome.to_dict(),
            'logs': {
                'message': 'File renamed successfully',
                'details': f"{outcome.original_name} -> {outcome.new_name}"
            }
        })

    except TaggerError as e:
        logger.error(f"Error renaming file: {e}")
        return error_response(e)
    except Exception as e:
        logger.error(f"Error renaming file: {e}")
        return error_response(e, 500)

@app.route('/api/rename-batch', methods=['POST'])
def rename_batch():
    """Rename several files"""
    try:
        batch = batch_coordinator.rename_batch(request_data().get('files'))
        return batch_response(batch)
    except ValidationError as e:
        return error_response(e, 400)
    except Exception as e:
        logger.error(f"Error in batch rename: {e}")
        return error_response(e, 500)

@app.route('/api/naming-templates')
def naming_templates():
    templates = [{'id': key, **preset} for key, preset in NAMING_TEMPLATES.items()]
    return jsonify({'success': True, 'templates': templates})

@app.route('/api/apply-naming-template', methods=['POST'])
def apply_naming_template():
    """Preview the file name a template produces; nothing is renamed"""
    try:
        data = request_data()
        pattern = data.get('templatePattern') or data.get('template')
        metadata = data.get('metadata')
        if not pattern or not metadata:
            raise ValidationError('Template pattern and metadata are required')

        new_name = render(resolve_template(pattern), metadata)
        return jsonify({
            'success': True,
            'newName': new_name,
            'filePath': data.get('filePath')
        })

    except TaggerError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error applying naming template: {e}")
        return error_response(e, 500)

@app.route('/api/export-json', methods=['POST'])
def export_json():
    """Save arbitrary export data as a JSON file in the exports directory"""
    try:
        data = request_data()
        json_path = save_export_json(data.get('data'), data.get('filename'), storage.exports_dir)
        return jsonify({
            'success': True,
            'path': json_path,
            'logs': {
                'message': 'JSON export finished',
                'details': f"File: {os.path.basename(json_path)}\nPath: {json_path}"
            }
        })
    except TaggerError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error exporting JSON: {e}")
        return error_response(e, 500)

@app.route('/api/export-batch-json', methods=['POST'])
def export_batch_json():
    """Collect the exported metadata of several files"""
    try:
        batch = batch_coordinator.export_batch(request_data().get('files'))
        return batch_response(batch, key='metadata')
    except ValidationError as e:
        return error_response(e, 400)
    except Exception as e:
        logger.error(f"Error in batch export: {e}")
        return error_response(e, 500)

@app.route('/api/generate-cover', methods=['POST'])
def generate_cover():
    """Generate cover art from keywords"""
    try:
        keywords = request_data().get('keywords')
        if not keywords:
            raise ValidationError('Keywords are required for cover art generation')

        text = keyword_text(keywords)
        logger.info(f"Generating cover art for keywords: {text}")
        result = generate_cover_art(keywords)

        return jsonify({
            'success': True,
            'imageUrl': result['imageUrl'],
            'logs': {
                'message': 'Cover art generated',
                'details': f"Keywords used: {text}"
            }
        })
    except TaggerError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error generating cover art: {e}")
        return error_response(e, 500)

# ===============
# FRONT END BUILD
# ===============

@app.route('/', defaults={'path': ''})
@app.route('/<path:path>')
def serve_front_end(path):
    """Serve the built front end, falling back to index.html for client routes"""
    if path.startswith('api/'):
        return jsonify({'success': False, 'error': 'Not found'}), 404
    if path and os.path.isfile(os.path.join(STATIC_DIR, path)):
        return send_from_directory(STATIC_DIR, path)
    if not os.path.isfile(os.path.join(STATIC_DIR, 'index.html')):
        return jsonify({'success': False, 'error': 'Front end not built'}), 404
    return send_from_directory(STATIC_DIR, 'index.html')


if __name__ == '__main__':
    app.run(host=HOST, port=PORT, debug=False)
