"""Tests for the media scanner."""

import os

import pytest

from mediadex.application.media_index import ClassifierPolicy, MediaScanner, scan_media
from mediadex.domain.exceptions import FileAccessError, RootNotFoundError, ScanIOError
from mediadex.infrastructure.cache import ContentCache


def test_entries_sorted_newest_first_with_casefolded_tie_break(make_tree):
    root = make_tree({
        "a.jpg": (b"a", 100),
        "C.jpg": (b"c", 200),
        "b.jpg": (b"b", 200),
        "sub/d.jpg": (b"d", 300),
    })

    result = scan_media(str(root))

    names = [entry.name for entry in result.categories["image/jpeg"]]
    assert names == ["d.jpg", "b.jpg", "C.jpg", "a.jpg"]


def test_categories_ordered_by_label(make_tree):
    root = make_tree({"v.mp4": b"v", "i.png": b"i", "s.mp3": b"s", "t.txt": "t"})

    result = scan_media(str(root))

    assert list(result.categories) == ["audio/mpeg", "image/png", "text/plain", "video/mp4"]


def test_excluded_and_unknown_files_never_appear(make_tree):
    root = make_tree({
        "a.jpg": b"a",
        ".DS_Store": b"x",
        "sub/Thumbs.db": b"x",
        "report.pdf": b"x",
        "README": b"x",
        ".git/x.png": b"x",
    })

    result = scan_media(str(root))

    paths = [entry.path for entries in result.categories.values() for entry in entries]
    assert paths == [str(root / "a.jpg")]
    assert result.stats.files_seen == 6
    assert result.stats.files_excluded == 5
    assert result.stats.files_indexed == 1


def test_only_images_carry_content(make_tree):
    root = make_tree({"a.jpg": b"jpeg-bytes", "b.mp4": b"mp4-bytes"})

    result = scan_media(str(root))

    image = result.categories["image/jpeg"][0]
    video = result.categories["video/mp4"][0]
    assert image.content == b"jpeg-bytes"
    assert image.size_bytes == len(b"jpeg-bytes")
    assert video.content is None
    assert video.size_bytes == len(b"mp4-bytes")


def test_entry_metadata_matches_stat(make_tree):
    root = make_tree({"clip.mp4": (b"12345", 1_600_000_000)})

    entry = scan_media(str(root)).categories["video/mp4"][0]

    assert entry.path == str(root / "clip.mp4")
    assert entry.modified_at == os.stat(root / "clip.mp4").st_mtime
    assert entry.category == "video/mp4"


def test_rescan_of_unchanged_tree_hits_cache(make_tree):
    root = make_tree({"a.jpg": b"a", "b.png": b"b", "sub/c.gif": b"c", "v.mp4": b"v"})
    cache = ContentCache()
    scanner = MediaScanner(cache=cache)

    first = scanner.scan(str(root))
    second = scanner.scan(str(root))

    assert first.stats.content_reads == 3
    assert second.stats.content_reads == 0
    assert second.stats.cache_hits == 3
    assert len(cache) == 3


def test_modified_file_is_read_again(make_tree):
    root = make_tree({"a.jpg": (b"old", 100)})
    cache = ContentCache()
    scanner = MediaScanner(cache=cache)
    scanner.scan(str(root))

    (root / "a.jpg").write_bytes(b"new")
    os.utime(root / "a.jpg", (200, 200))
    result = scanner.scan(str(root))

    assert result.categories["image/jpeg"][0].content == b"new"
    assert result.stats.content_reads == 1
    assert cache.get(str(root / "a.jpg"), 200) == b"new"
    assert cache.get(str(root / "a.jpg"), 100) is None


def test_missing_root_raises(tmp_path):
    with pytest.raises(RootNotFoundError) as excinfo:
        scan_media(str(tmp_path / "missing"))
    assert excinfo.value.path == str(tmp_path / "missing")


def test_file_as_root_raises(make_tree):
    root = make_tree({"a.jpg": b"a"})
    with pytest.raises(RootNotFoundError):
        scan_media(str(root / "a.jpg"))


def test_missing_root_does_not_touch_cache(tmp_path):
    cache = ContentCache()
    with pytest.raises(RootNotFoundError):
        scan_media(str(tmp_path / "missing"), cache=cache)
    assert cache.stats.misses == 0


def test_empty_root_has_no_categories(make_tree):
    root = make_tree({"empty": None})
    result = scan_media(str(root))
    assert result.categories == {}
    assert result.entry_count == 0


def test_root_inside_hidden_directory_is_indexed(tmp_path, make_tree):
    root = make_tree({"a.jpg": b"a"}, name=".library")
    result = scan_media(str(root))
    assert result.entry_count == 1


def test_unreadable_file_is_recorded_and_skipped(make_tree, monkeypatch):
    root = make_tree({"good.jpg": b"good", "bad.jpg": b"bad"})
    scanner = MediaScanner()
    original = scanner._load_content

    def flaky(path, modified_at, stats):
        if path.endswith("bad.jpg"):
            raise PermissionError(13, "Permission denied", path)
        return original(path, modified_at, stats)

    monkeypatch.setattr(scanner, "_load_content", flaky)
    result = scanner.scan(str(root))

    assert [e.name for e in result.categories["image/jpeg"]] == ["good.jpg"]
    assert len(result.stats.errors) == 1
    error = result.stats.errors[0]
    assert isinstance(error, FileAccessError)
    assert error.path == str(root / "bad.jpg")
    assert result.stats.files_skipped == 1


class _FailingListScanner(MediaScanner):
    def __init__(self, failing, **kwargs):
        super().__init__(**kwargs)
        self.failing = failing

    def _list_dir(self, directory):
        if directory == self.failing:
            raise PermissionError(13, "Permission denied", directory)
        return super()._list_dir(directory)


def test_unlistable_subdirectory_is_skipped(make_tree):
    root = make_tree({"a.jpg": b"a", "locked/b.jpg": b"b"})
    scanner = _FailingListScanner(str(root / "locked"))

    result = scanner.scan(str(root))

    assert [e.name for e in result.categories["image/jpeg"]] == ["a.jpg"]


def test_unlistable_root_raises_scan_error(make_tree):
    root = make_tree({"a.jpg": b"a"})
    scanner = _FailingListScanner(str(root))

    with pytest.raises(ScanIOError):
        scanner.scan(str(root))


class _VanishingEntry:
    """Directory entry whose file is gone by the time it is stat'ed."""

    def __init__(self, entry):
        self._entry = entry

    def __getattr__(self, name):
        return getattr(self._entry, name)

    def stat(self, **kwargs):
        raise FileNotFoundError(2, "No such file or directory", self._entry.path)


class _VanishingFileScanner(MediaScanner):
    def __init__(self, vanishing, **kwargs):
        super().__init__(**kwargs)
        self.vanishing = vanishing

    def _list_dir(self, directory):
        return [
            _VanishingEntry(entry) if entry.path == self.vanishing else entry
            for entry in super()._list_dir(directory)
        ]


def test_file_removed_before_stat_is_skipped_and_recorded(make_tree):
    root = make_tree({"a.mp4": b"a", "gone.mp4": b"g"})
    gone = str(root / "gone.mp4")
    scanner = _VanishingFileScanner(gone)

    result = scanner.scan(str(root))

    assert [e.name for e in result.categories["video/mp4"]] == ["a.mp4"]
    assert result.stats.files_indexed == 1
    assert result.stats.files_skipped == 1
    error = result.stats.errors[0]
    assert isinstance(error, FileAccessError)
    assert error.path == gone
    assert isinstance(error.cause, FileNotFoundError)


def test_symlinked_directories_not_followed_by_default(tmp_path, make_tree):
    outside = make_tree({"elsewhere.jpg": b"e"}, name="outside")
    root = make_tree({"a.jpg": b"a"})
    os.symlink(outside, root / "link", target_is_directory=True)

    result = scan_media(str(root))

    assert [e.name for e in result.categories["image/jpeg"]] == ["a.jpg"]


def test_symlink_cycles_terminate_when_following(make_tree):
    root = make_tree({"a.jpg": b"a", "sub/b.jpg": b"b"})
    os.symlink(root, root / "sub" / "loop", target_is_directory=True)

    result = scan_media(str(root), follow_symlinks=True)

    assert sorted(e.name for e in result.categories["image/jpeg"]) == ["a.jpg", "b.jpg"]


def test_include_hidden_policy_indexes_hidden_files(make_tree):
    root = make_tree({".git/x.png": b"x"})
    result = scan_media(str(root), policy=ClassifierPolicy(include_hidden=True))
    assert result.categories["image/png"][0].path == str(root / ".git" / "x.png")
