from shelf_inventory.models import KIND_IGNORED, KIND_ISBN, KIND_NORMAL, Scope
from shelf_inventory.normalization import is_isbn13, library_prefix, normalize, strip_non_digits

SCOPE = Scope(library_code="12")


def test_library_prefix_offsets_code_by_one_thousand():
    assert library_prefix("12") == "1012"
    assert library_prefix("8999") == "9999"


def test_twelve_digit_identifier_is_unchanged_and_idempotent():
    first = normalize("101200012345", SCOPE)
    again = normalize(first.identifier, SCOPE)
    assert first.kind == KIND_NORMAL
    assert first.identifier == "101200012345"
    assert again.identifier == first.identifier
    assert not first.was_auto_completed


def test_long_input_is_truncated_to_twelve_digits():
    result = normalize("1012000123459999", SCOPE)
    assert result.identifier == "101200012345"
    assert result.original_digits == "1012000123459999"


def test_short_input_is_auto_completed_with_library_prefix():
    result = normalize("55", SCOPE)
    assert result.identifier == "101200000055"
    assert result.was_auto_completed
    assert result.expected_prefix == "1012"


def test_auto_completion_pads_the_original_digits_literally():
    result = normalize("12345678901", SCOPE)
    assert result.identifier == "1012" + "12345678901"
    assert len(result.identifier) == 15


def test_non_digits_are_stripped_before_length_checks():
    assert strip_non_digits(" 1012-0001 2345 ") == "101200012345"
    assert normalize("1012-0001-2345", SCOPE).identifier == "101200012345"


def test_isbn_takes_precedence_over_truncation():
    result = normalize("9780134190440", SCOPE)
    assert result.kind == KIND_ISBN
    assert result.identifier == "9780134190440"


def test_isbn_with_bad_checksum_is_treated_as_barcode():
    assert not is_isbn13("9780134190441")
    result = normalize("9780134190441", SCOPE)
    assert result.kind == KIND_NORMAL
    assert result.identifier == "978013419044"


def test_empty_input_or_missing_library_is_ignored():
    assert normalize("   ", SCOPE).kind == KIND_IGNORED
    assert normalize("101200012345", Scope()).kind == KIND_IGNORED
