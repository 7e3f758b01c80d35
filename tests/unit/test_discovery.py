"""
Unit tests for image discovery and exclusion filtering.
"""

from pathlib import Path

import pytest

from avif_optimizer.infrastructure.media.discovery import (
    find_image_files, apply_exclusions, is_supported, expand_braces
)


@pytest.fixture
def gallery(tmp_path):
    """A directory tree with images, non-images and ignored folders."""
    for name in ['b.jpg', 'a.PNG', 'c.webp', 'notes.txt', 'd.heic']:
        (tmp_path / name).write_bytes(b'x')
    nested = tmp_path / 'nested'
    nested.mkdir()
    (nested / 'e.tiff').write_bytes(b'x')
    ignored = tmp_path / 'node_modules'
    ignored.mkdir()
    (ignored / 'f.jpg').write_bytes(b'x')
    return tmp_path


class TestIsSupported:

    @pytest.mark.parametrize('name', ['a.jpg', 'a.JPEG', 'a.png', 'a.webp', 'a.tif', 'a.tiff', 'a.heic', 'a.HEIF'])
    def test_supported(self, name):
        assert is_supported(name)

    @pytest.mark.parametrize('name', ['a.gif', 'a.avif', 'a.txt', 'noext'])
    def test_unsupported(self, name):
        assert not is_supported(name)


class TestFindImageFiles:

    def test_single_file(self, gallery):
        assert find_image_files(gallery / 'b.jpg') == [gallery / 'b.jpg']

    def test_single_unsupported_file(self, gallery):
        assert find_image_files(gallery / 'notes.txt') == []

    def test_directory(self, gallery):
        names = [p.name for p in find_image_files(gallery)]

        assert names == ['a.PNG', 'b.jpg', 'c.webp', 'd.heic']

    def test_directory_recursive_skips_ignored(self, gallery):
        names = [p.name for p in find_image_files(gallery, recursive=True)]

        assert 'e.tiff' in names
        assert 'f.jpg' not in names
        assert len(names) == 5

    def test_glob_pattern(self, gallery):
        files = find_image_files(str(gallery / '*.jpg'))

        assert files == [gallery / 'b.jpg']

    def test_recursive_glob_pattern(self, gallery):
        files = find_image_files(str(gallery / '**' / '*.tiff'))

        assert files == [gallery / 'nested' / 'e.tiff']

    def test_no_matches(self, tmp_path):
        assert find_image_files(str(tmp_path / 'missing' / '*.jpg')) == []


class TestApplyExclusions:

    def test_no_patterns(self):
        files = [Path('a.jpg'), Path('b.jpg')]

        assert apply_exclusions(files, []) == (files, 0)

    def test_name_pattern(self):
        files = [Path('photos/a.jpg'), Path('photos/a.thumb.jpg'), Path('other/b.thumb.png')]

        kept, excluded = apply_exclusions(files, ['*.thumb.*'])

        assert kept == [Path('photos/a.jpg')]
        assert excluded == 2

    def test_path_pattern(self):
        files = [Path('drafts/a.jpg'), Path('final/a.jpg')]

        kept, excluded = apply_exclusions(files, ['drafts/*'])

        assert kept == [Path('final/a.jpg')]
        assert excluded == 1


class TestBraceGlobs:

    def test_expand_braces(self):
        assert expand_braces('*.{jpg,png}') == ['*.jpg', '*.png']

    def test_expand_nested_and_multiple_groups(self):
        assert expand_braces('{a,b}/*.{jpg,{png,webp}}') == [
            'a/*.jpg', 'a/*.png', 'a/*.webp', 'b/*.jpg', 'b/*.png', 'b/*.webp',
        ]

    def test_no_groups(self):
        assert expand_braces('photos/*.jpg') == ['photos/*.jpg']
        assert expand_braces('{single}.jpg') == ['{single}.jpg']

    def test_brace_pattern_finds_each_extension(self, tmp_path):
        for name in ['a.jpg', 'b.png', 'c.webp']:
            (tmp_path / name).write_bytes(b'x')

        files = find_image_files(str(tmp_path / '*.{jpg,png}'))

        assert [p.name for p in files] == ['a.jpg', 'b.png']

    def test_overlapping_alternatives_are_deduplicated(self, tmp_path):
        (tmp_path / 'a.jpg').write_bytes(b'x')

        assert find_image_files(str(tmp_path / '{a,*}.jpg')) == [tmp_path / 'a.jpg']


class TestIgnoredDirectories:

    def test_search_root_inside_ignored_directory(self, tmp_path):
        root = tmp_path / 'node_modules' / 'pkg' / 'assets'
        root.mkdir(parents=True)
        (root / 'logo.png').write_bytes(b'x')

        assert find_image_files(root) == [root / 'logo.png']
        assert find_image_files(str(root / '*.png')) == [root / 'logo.png']

    def test_ignored_below_glob_root(self, tmp_path):
        (tmp_path / 'node_modules').mkdir()
        (tmp_path / 'node_modules' / 'a.jpg').write_bytes(b'x')
        (tmp_path / 'b.jpg').write_bytes(b'x')

        files = find_image_files(str(tmp_path / '**' / '*.jpg'))

        assert files == [tmp_path / 'b.jpg']

    def test_single_file_inside_ignored_directory(self, tmp_path):
        folder = tmp_path / '.git'
        folder.mkdir()
        (folder / 'a.jpg').write_bytes(b'x')

        assert find_image_files(folder / 'a.jpg') == [folder / 'a.jpg']
