import base64
from unittest.mock import patch

import pytest
from mutagen.id3 import ID3, TPE2, TXXX

from core.errors import (
    NotFoundError, CollisionError, EmptyResultError, InvalidPathError, WriteFailure, RenameFailure
)
from core.file_operations import FileOperationExecutor
from core.metadata.tag_mapper import build_tag_set

METADATA = {
    'title': 'Summer Breeze',
    'artist': 'Coastline',
    'genre': 'Electronic',
    'subgenre': 'Chillwave',
    'technical': '128 kbps',
    'keywords': ['relaxing', 'beach'],
    'mood': ['calm'],
    'usage': [],
}


@pytest.fixture
def executor(tmp_path):
    return FileOperationExecutor(str(tmp_path))


def test_write_tags_round_trips_through_mutagen(executor, make_mp3):
    path = make_mp3('song.mp3')
    executor.write_tags('song.mp3', build_tag_set(METADATA))

    tags = ID3(str(path))
    assert tags.version[:2] == (2, 3)
    assert tags['TIT2'].text == ['Summer Breeze']
    assert tags['TPE1'].text == ['Coastline']
    assert tags['TALB'].text == ['Chillwave']
    assert tags['TCON'].text == ['Electronic']
    assert tags['TXXX:KEYWORDS'].text == ['relaxing, beach']
    assert 'TXXX:USAGE' not in tags
    assert tags.getall('COMM')[0].text == ['128 kbps']


def test_write_tags_preserves_unmanaged_frames(executor, make_mp3):
    existing = ID3()
    existing.add(TPE2(encoding=3, text=['Band']))
    existing.add(TXXX(encoding=3, desc='CUSTOM', text=['keep']))
    path = make_mp3('song.mp3', tags=existing)

    executor.write_tags(str(path), build_tag_set(METADATA))
    executor.write_tags(str(path), build_tag_set({**METADATA, 'title': 'Again'}))

    tags = ID3(str(path))
    assert tags['TPE2'].text == ['Band']
    assert tags['TXXX:CUSTOM'].text == ['keep']
    assert tags['TIT2'].text == ['Again']
    assert len(tags.getall('TXXX:SUBGENRE')) == 1
    assert len(tags.getall('COMM')) == 1


def test_write_tags_empty_value_clears_stored_frame(executor, make_mp3):
    path = make_mp3('song.mp3')
    executor.write_tags('song.mp3', build_tag_set({**METADATA, 'usage': ['meditation']}))
    assert ID3(str(path))['TXXX:USAGE'].text == ['meditation']

    executor.write_tags('song.mp3', build_tag_set({**METADATA, 'usage': []}))

    tags = ID3(str(path))
    assert 'TXXX:USAGE' not in tags
    assert tags['TXXX:MOOD'].text == ['calm']


def test_write_tags_embeds_cover_art(executor, make_mp3):
    path = make_mp3('song.mp3')
    cover = 'data:image/jpeg;base64,' + base64.b64encode(b'jpeg-bytes').decode('ascii')
    executor.write_tags('song.mp3', build_tag_set({**METADATA, 'coverArt': cover}))

    pics = ID3(str(path)).getall('APIC')
    assert len(pics) == 1
    assert pics[0].type == 3
    assert pics[0].mime == 'image/jpeg'
    assert pics[0].data == b'jpeg-bytes'


def test_write_tags_with_remote_cover_still_succeeds(executor, make_mp3):
    path = make_mp3('song.mp3')
    tag_set = build_tag_set({**METADATA, 'coverArt': 'https://example.test/cover.jpg'})

    assert executor.write_tags('song.mp3', tag_set) == str(path)

    tags = ID3(str(path))
    assert tags['TIT2'].text == ['Summer Breeze']
    assert tags.getall('APIC') == []


def test_write_tags_missing_file(executor):
    with pytest.raises(NotFoundError):
        executor.write_tags('missing.mp3', build_tag_set(METADATA))


def test_write_tags_wraps_writer_errors(executor, make_mp3):
    make_mp3('song.mp3')
    with patch('core.file_operations.write_tag_set', side_effect=OSError('disk full')):
        with pytest.raises(WriteFailure, match='disk full'):
            executor.write_tags('song.mp3', build_tag_set(METADATA))


def test_rename_keeps_extension(executor, make_mp3, tmp_path):
    make_mp3('1700000000000-upload.mp3')
    outcome = executor.rename_file('1700000000000-upload.mp3', 'Coastline - Summer Breeze')

    assert outcome.new_name == 'Coastline - Summer Breeze.mp3'
    assert outcome.original_name == '1700000000000-upload.mp3'
    assert (tmp_path / 'Coastline - Summer Breeze.mp3').exists()
    assert not (tmp_path / '1700000000000-upload.mp3').exists()


def test_rename_does_not_double_extension(executor, make_mp3, tmp_path):
    make_mp3('a.mp3')
    assert executor.rename_file('a.mp3', 'b.MP3').new_name == 'b.mp3'
    assert (tmp_path / 'b.mp3').exists()


def test_rename_sanitizes_name(executor, make_mp3):
    make_mp3('a.mp3')
    assert executor.rename_file('a.mp3', 'AC/DC: Hit?').new_name == 'AC_DC_ Hit_.mp3'


def test_rename_replaces_nul_bytes(executor, make_mp3, tmp_path):
    make_mp3('a.mp3')
    assert executor.rename_file('a.mp3', 'x\x00y').new_name == 'x_y.mp3'
    assert (tmp_path / 'x_y.mp3').exists()


def test_rename_unsanitized_nul_byte_is_a_rename_failure(executor, make_mp3, tmp_path):
    make_mp3('a.mp3')
    with pytest.raises(RenameFailure):
        executor.rename_file('a.mp3', 'x\x00y', sanitize_name=False)
    assert (tmp_path / 'a.mp3').exists()


def test_rename_collision_leaves_both_files(executor, make_mp3, tmp_path):
    make_mp3('a.mp3')
    make_mp3('b.mp3')
    before = (tmp_path / 'b.mp3').read_bytes()

    with pytest.raises(CollisionError):
        executor.rename_file('a.mp3', 'b')

    assert (tmp_path / 'a.mp3').exists()
    assert (tmp_path / 'b.mp3').read_bytes() == before


def test_rename_to_empty_name(executor, make_mp3):
    make_mp3('a.mp3')
    with pytest.raises(EmptyResultError):
        executor.rename_file('a.mp3', '   ')


def test_rename_missing_file(executor):
    with pytest.raises(NotFoundError):
        executor.rename_file('missing.mp3', 'b')


def test_paths_outside_base_dir_are_rejected(executor):
    with pytest.raises(InvalidPathError):
        executor.rename_file('../outside.mp3', 'b')


def test_export_metadata_subset(executor):
    exported = executor.export_metadata({
        'filePath': '/uploads/1-song.mp3',
        'metadata': {**METADATA, 'artist': 'not exported'},
    })
    assert exported['originalName'] == '1-song.mp3'
    assert exported['duration'] == 0
    assert list(exported['metadata']) == [
        'title', 'genre', 'subgenre', 'technical', 'creative',
        'keywords', 'mood', 'usage', 'lyrics', 'language', 'song'
    ]
    assert exported['metadata']['song'] == 1
    assert 'artist' not in exported['metadata']
