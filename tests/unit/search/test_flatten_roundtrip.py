from __future__ import annotations

from scoop_search.index import BucketEntry, flatten, unflatten


def test_flatten_builds_bucket_slash_name_keys() -> None:
    index = {
        "main": BucketEntry(fingerprint="abc", packages={"git": "2.44", "7zip": "23.01"}),
        "extras": BucketEntry(fingerprint=None, packages={"vlc": "3.0.20"}),
        "empty": BucketEntry(fingerprint="def", packages={}),
    }

    assert flatten(index) == {
        "main/git": "2.44",
        "main/7zip": "23.01",
        "extras/vlc": "3.0.20",
    }


def test_flatten_survives_unflatten_roundtrip() -> None:
    index = {
        "main": BucketEntry(fingerprint="abc", packages={"git": "2.44", "curl": "8.5"}),
        "extras": BucketEntry(fingerprint=None, packages={"firefox-esr": "115.0"}),
    }
    flat = flatten(index)

    regrouped = unflatten(flat)

    assert flatten(regrouped) == flat
    assert {bucket: entry.packages for bucket, entry in regrouped.items()} == {
        bucket: entry.packages for bucket, entry in index.items()
    }


def test_flatten_does_not_mutate_input() -> None:
    index = {"main": BucketEntry(fingerprint="abc", packages={"git": "2.44"})}

    flat = flatten(index)
    flat["main/other"] = "1.0"

    assert index["main"].packages == {"git": "2.44"}
