from proofread.hashing import content_hash, fingerprint


def test_content_hash_matches_known_values() -> None:
    assert content_hash("") == "0"
    assert content_hash("a") == "2p"
    assert content_hash("ab") == "2e9"


def test_content_hash_wraps_to_signed_32_bits() -> None:
    value = content_hash("The quick brown fox jumps over the lazy dog.")

    assert int(value, 36) >= -(2**31)
    assert int(value, 36) < 2**31


def test_content_hash_changes_with_whitespace() -> None:
    assert content_hash("cat sat") != content_hash("cat  sat")


def test_fingerprint_separates_parts() -> None:
    assert fingerprint("ab", "c") != fingerprint("a", "bc")
    assert fingerprint("ab", "c") == fingerprint("ab", "c")
