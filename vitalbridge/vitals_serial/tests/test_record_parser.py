from __future__ import annotations

import logging
import random

import pytest

from vitalbridge.vitals_serial.errors import RecordParseError
from vitalbridge.vitals_serial.services.record_parser import (
    LineFramer,
    RecordAssembler,
    parse_record,
    random_humidity,
    random_temperature,
    split_pairs,
)

FULL = "heart:72,spo2:98,temp:31.5,humidity:45,bodytemp:36.6"


def test_parse_full_record_trims_and_lowercases():
    res = parse_record(" HEART : 72 , Spo2:98,temp:31.5 ,humidity: 45,BodyTemp:36.6 ")
    assert res.ok
    assert res.pairs == {"heart": "72", "spo2": "98", "temp": "31.5", "humidity": "45", "bodytemp": "36.6"}


def test_case_insensitive_keys_give_same_pairs():
    assert parse_record("TEMP:31.2").pairs == parse_record("temp:31.2").pairs


def test_token_without_separator_is_skipped():
    res = parse_record("heart72,spo2:98,temp:")
    assert res.ok
    assert res.pairs == {"spo2": "98"}


def test_value_split_on_first_colon_only():
    assert split_pairs("note:a:b") == {"note": "a:b"}


def test_record_without_pairs_is_an_error():
    res = parse_record("garbage,,:")
    assert not res.ok
    assert isinstance(res.error, RecordParseError)
    assert res.pairs == {}


def test_non_text_record_is_an_error():
    res = parse_record(b"heart:72")
    assert isinstance(res.error, RecordParseError)


def test_framer_keeps_partial_line_until_delimiter():
    framer = LineFramer("\r\n")
    assert framer.feed(b"heart:7") == []
    assert framer.feed(b"2,spo2:98\r\ntemp:3") == ["heart:72,spo2:98"]
    assert framer.pending == b"temp:3"
    assert framer.feed(b"1.5\r\n\r\n") == ["temp:31.5", ""]


def test_framer_replaces_undecodable_bytes():
    framer = LineFramer("\n")
    (line,) = framer.feed(b"temp:\xff31\n")
    assert line.startswith("temp:")


def test_framer_rejects_empty_delimiter():
    with pytest.raises(ValueError):
        LineFramer("")


def test_line_strategy_emits_every_line():
    asm = RecordAssembler("line")
    assert asm.push("temp:31.5") == "temp:31.5"
    assert asm.push("   ") is None
    assert asm.buffer == ""


def test_accumulate_waits_for_all_markers():
    asm = RecordAssembler("accumulate")
    assert asm.push("heart:72,spo2:98") is None
    assert asm.push("temp:31.5") is None
    record = asm.push("humidity:45,bodytemp:36.6")
    assert record is not None
    assert split_pairs(record) == split_pairs(FULL)
    assert asm.buffer == ""


def test_accumulate_bodytemp_alone_does_not_satisfy_temp():
    asm = RecordAssembler("accumulate")
    assert asm.push("heart:72,spo2:98,humidity:45,bodytemp:36.6") is None
    assert asm.push("temp:31.5") is not None


def test_accumulate_drops_buffer_past_bound():
    asm = RecordAssembler("accumulate", max_buffer_chars=32)
    assert asm.push("heart:72,spo2:98") is None
    assert asm.push("heart:73,spo2:97,heart:74") is None
    assert asm.buffer == ""


def test_framer_drops_pending_past_bound_on_wrong_line_ending(caplog):
    framer = LineFramer("\r\n", max_pending_bytes=4096)
    with caplog.at_level(logging.WARNING, logger="vitals.parser"):
        for _ in range(2000):
            assert framer.feed(b"heart:72,spo2:98\n") == []
            assert len(framer.pending) <= 4096
    assert "line ending" in caplog.text


def test_framer_bound_keeps_lines_that_complete():
    framer = LineFramer("\n", max_pending_bytes=16)
    assert framer.feed(b"heart:72,spo2:98,temp:31.5\n") == ["heart:72,spo2:98,temp:31.5"]
    assert framer.feed(b"x" * 17) == []
    assert framer.pending == b""
    assert framer.feed(b"temp:31.5\n") == ["temp:31.5"]


def test_framer_finds_delimiter_split_across_feeds():
    framer = LineFramer("\r\n")
    assert framer.feed(b"heart:72\r") == []
    assert framer.feed(b"\nspo2:98") == ["heart:72"]
    assert framer.pending == b"spo2:98"


def test_accumulate_unbounded_when_zero():
    asm = RecordAssembler("accumulate", max_buffer_chars=0)
    for _ in range(500):
        asm.push("heart:72")
    assert len(asm.buffer) > 4096


def test_unknown_strategy_rejected():
    with pytest.raises(ValueError):
        RecordAssembler("batch")


def test_synthetic_values_stay_in_range():
    rng = random.Random(1234)
    for _ in range(200):
        t = random_temperature(rng)
        assert 30.0 <= float(t) <= 33.0
        assert len(t.split(".")[1]) == 2
        h = random_humidity(rng)
        assert h.isdigit()
        assert 40 <= int(h) <= 42
