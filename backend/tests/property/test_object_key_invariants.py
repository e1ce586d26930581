"""Property-based tests for image object key generation."""

import os
import re

from hypothesis import given, settings
from hypothesis import strategies as st

from sat_api.storage.images import ImageLifecycleManager
from sat_api.storage.s3 import S3ObjectStorage

filenames = st.text(
    alphabet=st.characters(blacklist_categories=("Cs",), blacklist_characters="\x00"),
    max_size=80,
)


@settings(max_examples=200, deadline=None)
@given(filename=filenames)
def test_key_shape_for_any_filename(filename: str) -> None:
    """
    Property: every key is ``questions/{base[:20]}-{8 hex}{ext}``.

    Invariants:
    - the base name keeps at most its first 20 characters
    - the extension is preserved verbatim
    - the suffix is 8 lowercase hex characters
    """
    manager = ImageLifecycleManager(storage=None)
    base, ext = os.path.splitext(os.path.basename(filename))

    key = manager.generate_object_key(filename)

    assert key.startswith("questions/")
    name = key[len("questions/"):]
    assert re.fullmatch(re.escape(base[:20]) + r"-[0-9a-f]{8}" + re.escape(ext), name, re.DOTALL)


@settings(max_examples=50, deadline=None)
@given(filename=filenames)
def test_generated_key_round_trips_through_location(filename: str) -> None:
    """Property: the key derived back from a stored location is the key that was written."""
    manager = ImageLifecycleManager(storage=None)
    storage = S3ObjectStorage(client=None, bucket="test-bucket", region="us-east-1")

    key = manager.generate_object_key(filename)

    assert manager.key_for_reference(storage.location_for(key)) == key
