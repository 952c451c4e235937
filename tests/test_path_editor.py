import pytest

import path_editor
from path_errors import DuplicateEntryError, ErrorKind, NotFoundError


BASE = [r"C:\A", r"C:\B", r"C:\Program Files\Tool"]


def test_append_adds_item_last():
    assert path_editor.append(BASE, r"C:\C") == BASE + [r"C:\C"]


def test_prepend_adds_item_first():
    result = path_editor.prepend(BASE, r"C:\Z")
    assert result[0] == r"C:\Z"
    assert result[1:] == BASE


def test_editors_do_not_modify_input():
    entries = list(BASE)
    path_editor.append(entries, r"C:\C")
    path_editor.prepend(entries, r"C:\Z")
    path_editor.delete(entries, r"C:\A")
    assert entries == BASE


@pytest.mark.parametrize("item", [r"C:\C", r"D:\tools", "%USERPROFILE%\\bin"])
def test_delete_undoes_append(item):
    assert path_editor.delete(path_editor.append(BASE, item), item) == BASE


@pytest.mark.parametrize("item", [r"C:\Z", r"\\server\share\bin"])
def test_prepended_item_is_found_at_position_zero(item):
    assert path_editor.find_index(path_editor.prepend(BASE, item), item) == 0


@pytest.mark.parametrize("variant", [r"C:\A", r"c:\a", r"  C:\a ", "\tc:\\A\t", r"C:\PROGRAM FILES\TOOL"])
def test_duplicates_rejected_regardless_of_case_and_whitespace(variant):
    entries = list(BASE)
    with pytest.raises(DuplicateEntryError) as exc:
        path_editor.append(entries, variant)
    assert exc.value.item == variant
    with pytest.raises(DuplicateEntryError):
        path_editor.prepend(entries, variant)
    assert entries == BASE


def test_duplicate_check_ignores_whitespace_in_stored_entries():
    with pytest.raises(DuplicateEntryError):
        path_editor.append([r" C:\A  ", r"C:\B"], r"c:\a")


def test_delete_matches_case_insensitively_and_keeps_order():
    assert path_editor.delete(BASE, r"  c:\b ") == [r"C:\A", r"C:\Program Files\Tool"]


def test_delete_removes_only_first_duplicate():
    entries = [r"C:\A", r"C:\B", r"c:\a"]
    assert path_editor.delete(entries, r"C:\A") == [r"C:\B", r"c:\a"]


def test_delete_missing_item_raises_not_found():
    entries = list(BASE)
    with pytest.raises(NotFoundError) as exc:
        path_editor.delete(entries, r"C:\Missing")
    assert exc.value.item == r"C:\Missing"
    assert r"C:\Missing" in str(exc.value)
    assert exc.value.kind is ErrorKind.NOT_FOUND
    assert entries == BASE


def test_delete_from_empty_list_raises_not_found():
    with pytest.raises(NotFoundError):
        path_editor.delete([], r"C:\A")


def test_find_index_and_contains():
    assert path_editor.find_index(BASE, r"C:\B") == 1
    assert path_editor.find_index(BASE, r"C:\Nope") is None
    assert path_editor.contains(BASE, r"c:\program files\tool")
    assert not path_editor.contains([], r"C:\A")
