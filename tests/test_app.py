import json
import os
from io import BytesIO
from unittest.mock import patch

import pytest
from mutagen.id3 import ID3

import app as app_module
from core.storage import StandaloneStorage

METADATA = {
    'title': 'Summer Breeze',
    'artist': 'Coastline',
    'genre': 'Electronic',
    'subgenre': 'Chillwave',
    'technical': '128 kbps',
    'creative': 'Dreamy pads',
    'keywords': ['relaxing', 'beach'],
    'mood': ['calm'],
    'usage': ['meditation'],
}


@pytest.fixture
def storage(tmp_path):
    previous = app_module.storage
    provider = app_module.configure_storage(StandaloneStorage(str(tmp_path)))
    yield provider
    app_module.configure_storage(previous)


@pytest.fixture
def client(storage):
    return app_module.app.test_client()


@pytest.fixture
def uploaded(storage, make_mp3):
    from pathlib import Path
    return make_mp3('1700000000000-song.mp3', directory=Path(storage.uploads_dir))


def test_status(client):
    res = client.get('/api/status')
    assert res.status_code == 200
    assert res.get_json()['deployTarget'] == 'standalone'
    assert res.headers['Cache-Control'].startswith('no-store')


def test_upload_stores_and_analyzes(client, storage):
    analysis = {'genre': 'Electronic', 'subgenre': 'Chillwave'}
    with patch.object(app_module.analysis_engine, 'analyze', return_value=analysis) as analyze:
        res = client.post(
            '/api/upload',
            data={'files': (BytesIO(b'ID3' + b'\x00' * 32), 'my song.mp3', 'audio/mpeg')},
            content_type='multipart/form-data'
        )

    assert res.status_code == 200
    body = res.get_json()
    record = body['files'][0]
    assert record['originalName'] == 'my song.mp3'
    assert record['id'].endswith('-my_song.mp3')
    assert record['duration'] == 0
    assert record['analysis'] == analysis
    assert os.path.isfile(record['path'])
    assert os.path.dirname(record['path']) == storage.uploads_dir
    analyze.assert_called_once_with(record['path'])
    assert body['logs']['details'] == ['my song.mp3']


def test_upload_rejects_non_mp3(client):
    res = client.post(
        '/api/upload',
        data={'files': (BytesIO(b'hello'), 'notes.txt', 'text/plain')},
        content_type='multipart/form-data'
    )
    assert res.status_code == 400
    assert res.get_json()['success'] is False


def test_upload_without_files(client):
    assert client.post('/api/upload', data={}, content_type='multipart/form-data').status_code == 400


def test_write_tags_single_file(client, uploaded):
    res = client.post('/api/write-tags', json={'filePath': str(uploaded), 'metadata': METADATA})

    assert res.status_code == 200
    assert res.get_json()['success'] is True
    tags = ID3(str(uploaded))
    assert tags['TIT2'].text == ['Summer Breeze']
    assert tags['TXXX:CREATIVE'].text == ['Dreamy pads']
    assert tags['TXXX:SONG'].text == ['1']


def test_write_tags_with_remote_cover(client, uploaded):
    res = client.post('/api/write-tags', json={
        'filePath': str(uploaded),
        'metadata': {**METADATA, 'coverArt': 'http://example.test/cover.jpg'}
    })

    assert res.status_code == 200
    assert res.get_json()['success'] is True
    tags = ID3(str(uploaded))
    assert tags['TIT2'].text == ['Summer Breeze']
    assert tags.getall('APIC') == []


def test_write_tags_with_non_string_cover(client, uploaded):
    res = client.post('/api/write-tags', json={'filePath': str(uploaded), 'metadata': {**METADATA, 'coverArt': {'url': 'y'}}})
    assert res.status_code == 200
    assert ID3(str(uploaded)).getall('APIC') == []


def test_write_tags_missing_file(client, storage):
    res = client.post('/api/write-tags', json={'filePath': 'missing.mp3', 'metadata': METADATA})
    assert res.status_code == 404
    assert res.get_json() == {'success': False, 'error': 'File not found'}


def test_write_tags_outside_storage(client, storage):
    res = client.post('/api/write-tags', json={'filePath': '../../etc/passwd', 'metadata': METADATA})
    assert res.status_code == 403


def test_write_batch_tags(client, uploaded):
    res = client.post('/api/write-batch-tags', json={'files': [
        {'filePath': uploaded.name, 'metadata': METADATA},
        {'filePath': 'gone.mp3', 'metadata': METADATA},
    ]})

    body = res.get_json()
    assert res.status_code == 200
    assert body['results'] == [{'filePath': uploaded.name, 'success': True}]
    assert body['errors'] == [{'filePath': 'gone.mp3', 'error': 'File not found'}]
    assert body['logs']['message']


@pytest.mark.parametrize('endpoint', ['/api/write-batch-tags', '/api/rename-batch', '/api/export-batch-json'])
def test_malformed_batches(client, endpoint):
    for payload in ({}, {'files': []}):
        res = client.post(endpoint, json=payload)
        assert res.status_code == 400
        assert res.get_json()['success'] is False


def test_rename(client, uploaded, storage):
    res = client.post('/api/rename', json={'filePath': uploaded.name, 'newName': 'Coastline - Summer Breeze'})

    body = res.get_json()
    assert res.status_code == 200
    assert body['newName'] == 'Coastline - Summer Breeze.mp3'
    assert body['newPath'] == os.path.join(storage.uploads_dir, 'Coastline - Summer Breeze.mp3')
    assert body['originalName'] == uploaded.name


def test_rename_with_template(client, uploaded):
    res = client.post('/api/rename', json={
        'filePath': uploaded.name,
        'metadata': METADATA,
        'options': {'useTemplate': True, 'template': 'standard'}
    })
    assert res.get_json()['newName'] == 'Coastline - Summer Breeze.mp3'


def test_rename_collision(client, uploaded, make_mp3):
    make_mp3('taken.mp3', directory=uploaded.parent)
    res = client.post('/api/rename', json={'filePath': uploaded.name, 'newName': 'taken'})
    assert res.status_code == 409
    assert uploaded.exists()


def test_rename_with_nul_byte(client, uploaded):
    res = client.post('/api/rename', json={'filePath': uploaded.name, 'newName': 'x\u0000y'})
    assert res.status_code == 200
    assert res.get_json()['newName'] == 'x_y.mp3'


def test_rename_missing_name(client, uploaded):
    assert client.post('/api/rename', json={'filePath': uploaded.name}).status_code == 400


def test_rename_batch(client, uploaded):
    res = client.post('/api/rename-batch', json={'files': [{'filePath': uploaded.name, 'newName': 'New'}]})
    assert res.get_json()['results'][0]['newName'] == 'New.mp3'


def test_naming_templates(client):
    templates = client.get('/api/naming-templates').get_json()['templates']
    assert {'id': 'standard', 'name': 'Standard', 'pattern': '{artist} - {title}',
            'description': 'Artist - Title'} in templates


def test_apply_naming_template_preview(client, uploaded):
    res = client.post('/api/apply-naming-template', json={
        'filePath': uploaded.name,
        'metadata': {'title': 'B'},
        'templatePattern': '{artist} - {title}'
    })
    assert res.get_json()['newName'] == 'B'
    assert uploaded.exists()


def test_apply_naming_template_empty_result(client):
    res = client.post('/api/apply-naming-template', json={'metadata': {'title': 'B'}, 'templatePattern': '{artist}'})
    assert res.status_code == 400


def test_export_json(client, storage):
    res = client.post('/api/export-json', json={'data': {'title': 'Été'}, 'filename': 'my/export'})

    path = res.get_json()['path']
    assert path == os.path.join(storage.exports_dir, 'my_export.json')
    with open(path, encoding='utf-8') as f:
        assert json.load(f) == {'title': 'Été'}


def test_export_batch_json(client):
    res = client.post('/api/export-batch-json', json={'files': [{'filePath': '/x/1-a.mp3', 'metadata': METADATA}]})
    body = res.get_json()
    assert body['metadata'][0]['originalName'] == '1-a.mp3'
    assert body['metadata'][0]['metadata']['keywords'] == ['relaxing', 'beach']
    assert body['errors'] == []


def test_generate_cover(client):
    with patch.object(app_module, 'generate_cover_art', return_value={'imageUrl': 'data:image/png;base64,AA=='}):
        res = client.post('/api/generate-cover', json={'keywords': ['sunset', 'beach']})

    body = res.get_json()
    assert body['imageUrl'] == 'data:image/png;base64,AA=='
    assert body['logs']['details'] == 'Keywords used: sunset, beach'


def test_generate_cover_requires_keywords(client):
    assert client.post('/api/generate-cover', json={'keywords': []}).status_code == 400


def test_unknown_api_route(client):
    assert client.get('/api/nothing').status_code == 404


def test_front_end_fallback(client, tmp_path, monkeypatch):
    dist = tmp_path / 'dist'
    dist.mkdir()
    (dist / 'index.html').write_text('<html>tagger</html>')
    monkeypatch.setattr(app_module, 'STATIC_DIR', str(dist))

    res = client.get('/batch/settings')
    assert res.status_code == 200
    assert b'tagger' in res.data
