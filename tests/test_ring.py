import pytest

from inlet.array_string import ArrayString
from inlet.ring import ClientMeta, Entry, EntryLayout, Inlet, inlet_path


def two_words():
    return EntryLayout([("value", "Q"), ("value2", "Q")])


def test_initialise_inlet(tmp_path):
    with Inlet("test", EntryLayout([]), 8, 2, tmp_path) as inlet:
        assert repr(inlet.topic) == '"test"'
        assert inlet.initialised is True
    assert (tmp_path / "inlet-test").exists()


def test_file_sizes(tmp_path):
    with Inlet("empty", EntryLayout([]), 8, 2, tmp_path) as inlet:
        assert inlet.size == 912
    with Inlet("words", two_words(), 8, 2, tmp_path) as inlet:
        assert inlet.size == 1040
    assert (tmp_path / "inlet-words").stat().st_size == 1040


def test_header_contents(tmp_path):
    with Inlet("test", two_words(), 8, 2, tmp_path):
        raw = (tmp_path / "inlet-test").read_bytes()
    assert raw[:4] == b"test"
    assert raw[4:128] == bytes(124)
    assert int.from_bytes(raw[128:136], "little") == 16
    assert int.from_bytes(raw[136:144], "little") == 8
    assert int.from_bytes(raw[144:152], "little") == 2
    assert raw[152] == 1


def test_inlet_path(tmp_path):
    assert inlet_path("abc", tmp_path) == tmp_path / "inlet-abc"
    assert inlet_path(ArrayString("abc")).name == "inlet-abc"


def test_new_ring_is_zeroed(tmp_path):
    with Inlet("zero", two_words(), 4, 3, tmp_path) as inlet:
        assert inlet.producer.sequence == 0
        assert len(inlet.consumers) == 3
        assert all(c.id.is_empty() and c.sequence == 0 for c in inlet.consumers)
        assert inlet.entry(0).as_dict() == {"value": 0, "value2": 0}


def test_second_opener_shares_memory(tmp_path):
    with Inlet("shared", two_words(), 8, 2, tmp_path) as first, Inlet(
        "shared", two_words(), 8, 2, tmp_path
    ) as second:
        slot = first.entry(3)
        slot.value = 69420
        slot.value2 = 0xDEADBEEF
        first.producer.sequence = 4
        first.consumers[1].id = "subscriber1"
        assert second.entry(3).as_dict() == {"value": 69420, "value2": 0xDEADBEEF}
        assert second.producer.sequence == 4
        assert str(second.consumers[1].id) == "subscriber1"


def test_entry_wraps_around(tmp_path):
    with Inlet("wrap", two_words(), 8, 1, tmp_path) as inlet:
        inlet.entry(1).value = 5
        assert inlet.entry(9).value == 5
        assert inlet.entry(9) is inlet.entry(1)
        with pytest.raises(ValueError):
            inlet.entry(-1)


def test_existing_file_is_not_reinitialised(tmp_path):
    with Inlet("probe", two_words(), 8, 2, tmp_path) as probe:
        size = probe.size
    (tmp_path / "inlet-blank").write_bytes(bytes(size))
    with Inlet("blank", two_words(), 8, 2, tmp_path) as inlet:
        assert inlet.initialised is False
        assert inlet.topic.is_empty()


def test_existing_file_too_small(tmp_path):
    (tmp_path / "inlet-small").write_bytes(bytes(16))
    with pytest.raises(ValueError):
        Inlet("small", two_words(), 8, 2, tmp_path)


def test_invalid_counts(tmp_path):
    with pytest.raises(ValueError):
        Inlet("bad", two_words(), 0, 2, tmp_path)
    with pytest.raises(ValueError):
        Inlet("bad", two_words(), 8, -1, tmp_path)


def test_client_meta_round_trip():
    meta = ClientMeta(bytearray(ClientMeta.SIZE))
    meta.id = "consumer1"
    meta.sequence = 42
    meta.timestamp = 7
    assert meta.id == ArrayString("consumer1")
    assert (meta.sequence, meta.timestamp) == (42, 7)
    with pytest.raises(ValueError):
        ClientMeta(bytearray(10))


def test_layout_encode_decode_round_trip():
    layout = EntryLayout({"flag": "?", "count": "I", "name": "4s"})
    data = layout.encode({"flag": True, "count": 9, "name": b"abcd"})
    assert layout.size == 9
    assert layout.names == ("flag", "count", "name")
    assert layout.decode(data) == {"flag": True, "count": 9, "name": b"abcd"}


def test_layout_encode_errors():
    layout = two_words()
    with pytest.raises(KeyError):
        layout.encode({"value": 1})
    with pytest.raises(ValueError):
        layout.encode({"value": 1, "value2": 2, "other": 3})
    with pytest.raises(ValueError):
        layout.encode({"value": -1, "value2": 2})
    with pytest.raises(ValueError):
        layout.decode(bytes(4))


@pytest.mark.parametrize(
    "fields, byte_order",
    [
        ([("a", "Q")], "@"),
        ([("a", "Q"), ("a", "I")], "<"),
        ([("a", "2Q")], "<"),
        ([("a", "x")], "<"),
        ([("a", "nonsense")], "<"),
        ([("_hidden", "Q")], "<"),
        ([("as_dict", "Q")], "<"),
        ([("not valid", "Q")], "<"),
    ],
)
def test_layout_rejects_bad_definitions(fields, byte_order):
    with pytest.raises(ValueError):
        EntryLayout(fields, byte_order)


def test_entry_fields():
    layout = two_words()
    entry = Entry(layout, bytearray(layout.size))
    entry.value = 69
    entry.value2 = 0xDEADBEEF
    assert entry.value == 69
    assert entry.as_dict() == {"value": 69, "value2": 0xDEADBEEF}
    with pytest.raises(AttributeError):
        entry.missing
    with pytest.raises(AttributeError):
        entry.missing = 1
    with pytest.raises(ValueError):
        Entry(layout, bytearray(3))


def test_big_endian_layout():
    layout = EntryLayout([("v", "H")], ">")
    buffer = bytearray(layout.size)
    Entry(layout, buffer).v = 0x0102
    assert bytes(buffer) == b"\x01\x02"