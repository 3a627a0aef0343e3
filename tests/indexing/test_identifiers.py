"""Tests for stable external identifiers."""

import hashlib
import subprocess
import sys

from media_index.indexing import normalize_external_id, unique_external_id
from media_index.models import MediaItem


def test_remote_id():
    item = MediaItem(remote_id="dQw4w9WgXcQ", title="Intro")

    assert unique_external_id(item) == "remote-dQw4w9WgXcQ"


def test_local_id_uses_encoded_filename_and_path_digest():
    path = "/Users/me/Movies/My Talk (2024).mp4"
    item = MediaItem(local_path=path, title="My Talk")

    digest = hashlib.sha256(path.encode("utf-8")).hexdigest()[:12]

    assert unique_external_id(item) == f"local-My%20Talk%20(2024).mp4-{digest}"


def test_local_id_encodes_non_ascii_filename():
    item = MediaItem(local_path="/videos/café.mov", title="Cafe")

    assert unique_external_id(item).startswith("local-caf%C3%A9.mov-")


def test_same_filename_different_directories():
    a = MediaItem(local_path="/a/clip.mp4", title="Clip")
    b = MediaItem(local_path="/b/clip.mp4", title="Clip")

    assert unique_external_id(a) != unique_external_id(b)


def test_local_id_is_deterministic():
    item = MediaItem(local_path="/videos/clip.mp4", title="Clip")

    assert unique_external_id(item) == unique_external_id(item)
    assert unique_external_id(item) == unique_external_id(item.model_copy())


def test_local_id_is_stable_across_processes():
    """The digest does not depend on per-process hash seeds."""
    item = MediaItem(local_path="/videos/clip.mp4", title="Clip")
    script = (
        "from media_index.indexing import unique_external_id;"
        "from media_index.models import MediaItem;"
        "print(unique_external_id(MediaItem(local_path='/videos/clip.mp4', title='Clip')))"
    )

    output = subprocess.run(
        [sys.executable, "-c", script], capture_output=True, text=True, check=True
    ).stdout.strip()

    assert output == unique_external_id(item)


def test_normalize_bare_id():
    assert normalize_external_id("dQw4w9WgXcQ") == "remote-dQw4w9WgXcQ"


def test_normalize_keeps_prefixed_ids():
    assert normalize_external_id("remote-abc") == "remote-abc"
    assert normalize_external_id("local-clip.mp4-0123456789ab") == "local-clip.mp4-0123456789ab"
