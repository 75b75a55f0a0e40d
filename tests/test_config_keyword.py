import pytest

from pktperf.config_keyword import (
    CONFIG_ARG_NUM_MAX,
    Keyword,
    KeywordError,
    format_help,
    parse_file,
    parse_line,
)


def _recorder(store):
    def handler(args, data):
        data.append(args)

    return handler


def _failing(args, data):
    raise ValueError("bad value")


def _write(tmp_path, text):
    path = tmp_path / "test.conf"
    path.write_text(text, encoding="latin-1")
    return str(path)


def test_parse_line_words():
    assert parse_line("cpu 0 1\n") == ["cpu", "0", "1"]


def test_parse_line_tabs_and_spaces():
    assert parse_line("\t port  a\tb \r\n") == ["port", "a", "b"]


def test_parse_line_blank_and_comment():
    assert parse_line("   \n") == []
    assert parse_line("# cpu 0\n") == []
    assert parse_line("#cpu 0\n") == []


def test_comment_only_at_start():
    assert parse_line("cpu # 0\n") == ["cpu", "#", "0"]


def test_parse_line_rejects_control_characters():
    with pytest.raises(KeywordError):
        parse_line("cpu \x01\n")


def test_parse_line_rejects_non_ascii():
    with pytest.raises(KeywordError):
        parse_line("cpu \xe9\n")


def test_parse_line_argument_limit():
    words = [str(i) for i in range(CONFIG_ARG_NUM_MAX + 8)]
    assert parse_line(" ".join(words)) == words[:CONFIG_ARG_NUM_MAX]


def test_parse_file_calls_handlers(tmp_path):
    calls = []
    keywords = [Keyword("cpu", _recorder(calls), ""), Keyword("mode", _recorder(calls), "")]
    path = _write(tmp_path, "# comment\ncpu 0-3\n\nmode client\n")
    parse_file(path, keywords, calls)
    assert calls == [["cpu", "0-3"], ["mode", "client"]]


def test_parse_file_without_handler(tmp_path):
    calls = []
    keywords = [Keyword("daemon"), Keyword("cpu", _recorder(calls))]
    parse_file(_write(tmp_path, "daemon\ncpu 1\n"), keywords, calls)
    assert calls == [["cpu", "1"]]


def test_parse_file_unknown_keyword(tmp_path):
    keywords = [Keyword("cpu", _recorder([]))]
    with pytest.raises(KeywordError) as info:
        parse_file(_write(tmp_path, "cpu 0\nbogus 1\n"), keywords, [])
    assert info.value.line == 2
    assert "bogus" in str(info.value)


def test_parse_file_handler_error(tmp_path):
    keywords = [Keyword("cpu", _failing)]
    with pytest.raises(KeywordError) as info:
        parse_file(_write(tmp_path, "\ncpu x\n"), keywords, None)
    assert info.value.line == 2
    assert isinstance(info.value.__cause__, ValueError)


def test_parse_file_bad_character(tmp_path):
    keywords = [Keyword("cpu", _recorder([]))]
    with pytest.raises(KeywordError) as info:
        parse_file(_write(tmp_path, "cpu \x02\n"), keywords, [])
    assert info.value.line == 1


def test_parse_file_missing(tmp_path):
    with pytest.raises(KeywordError):
        parse_file(str(tmp_path / "absent.conf"), [], None)


def test_long_line_read_in_pieces(tmp_path):
    calls = []
    keywords = [Keyword("k", _recorder(calls))]
    path = _write(tmp_path, "k " + "x" * 3000 + "\n")
    with pytest.raises(KeywordError) as info:
        parse_file(path, keywords, calls)
    assert len(calls) == 1
    assert calls[0][0] == "k"
    assert info.value.line == 2


def test_format_help():
    keywords = [Keyword("a", None, "x y"), Keyword("b", None, None), Keyword("c", None, "")]
    assert format_help(keywords) == "a x y\nb\nc \n"