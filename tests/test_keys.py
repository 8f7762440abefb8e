import pytest

from tilecomp.keys import Key, Modifiers, keysym_from_name


def test_letter_is_case_insensitive_and_lowercase():
    assert keysym_from_name("T") == ord("t")
    assert keysym_from_name("t") == ord("t")


def test_named_punctuation_and_digits():
    assert keysym_from_name("Comma") == ord(",")
    assert keysym_from_name("comma") == ord(",")
    assert keysym_from_name("1") == ord("1")


def test_aliases_share_a_keysym():
    assert keysym_from_name("Page_Up") == keysym_from_name("Prior")
    assert keysym_from_name("page_down") == keysym_from_name("Next")


def test_raw_hex_form_matches_named_keysym():
    assert keysym_from_name("0x1008ff13") == keysym_from_name("XF86AudioRaiseVolume")
    assert keysym_from_name("0xff0d") == keysym_from_name("Return")


def test_unicode_form():
    assert keysym_from_name("U0041") == ord("A")
    assert keysym_from_name("U20AC") == 0x010020AC
    assert keysym_from_name("U0007") is None


def test_function_keys_are_distinct():
    names = [f"F{n}" for n in range(1, 13)]
    syms = [keysym_from_name(name) for name in names]
    assert len(set(syms)) == len(names)
    assert syms == sorted(syms)


@pytest.mark.parametrize("name", ["", "NotAKey", "Uzz", "0xnothex"])
def test_unknown_names(name):
    assert keysym_from_name(name) is None


def test_parse_mod_t():
    assert Key.parse("Mod+T") == Key(ord("t"), Modifiers.COMPOSITOR)


def test_parse_several_modifiers():
    key = Key.parse("Mod+Ctrl+Shift+L")
    assert key.keysym == ord("l")
    assert key.modifiers == Modifiers.COMPOSITOR | Modifiers.SHIFT | Modifiers.CTRL


def test_parse_modifier_aliases_and_case():
    assert Key.parse("control+WIN+alt+q") == Key.parse("Ctrl+Super+Alt+Q")
    assert Key.parse("Super+Q").modifiers == Key.parse("Win+Q").modifiers


def test_parse_trims_modifier_whitespace():
    assert Key.parse(" Mod +Comma") == Key(ord(","), Modifiers.COMPOSITOR)


def test_parse_without_modifiers():
    assert Key.parse("Escape") == Key(keysym_from_name("Escape"), Modifiers(0))


def test_parse_digit_key():
    assert Key.parse("Mod+1") == Key(ord("1"), Modifiers.COMPOSITOR)


def test_invalid_modifier():
    with pytest.raises(ValueError, match="invalid modifier: Hyper"):
        Key.parse("Hyper+T")


@pytest.mark.parametrize("text", ["Mod+", "Mod+Nope", "Mod+ T", ""])
def test_invalid_key(text):
    with pytest.raises(ValueError, match="invalid key"):
        Key.parse(text)


def test_empty_modifier_part_is_invalid():
    with pytest.raises(ValueError, match="invalid modifier"):
        Key.parse("Ctrl++T")