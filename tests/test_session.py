import re

import pytest

from sessionlog import FatalError, Level, SessionDiedError, SessionErrorKind
from sessionlog.session import BOTTOM_BORDER, TOP_BORDER, render_box

BOX_CHARS = ("┏", "┃", "┗")


def test_empty_session_collapses_to_one_line(registry, log_dir, read_log):
    logger = registry.get_or_create("svc")
    with logger.session("idle"):
        pass
    lines = read_log(log_dir)
    assert len(lines) == 1
    (line,) = lines
    assert not any(ch in line for ch in BOX_CHARS)
    assert re.match(r"^\S{32}     svc:idle - .+:\d+ - Session end, Elapsed: \d+us$", line), line


def test_box_report_shape(registry, log_dir, read_log):
    logger = registry.get_or_create("svc")
    with logger.session("work") as s:
        for i in range(3):
            s.info(f"message-{i}")
    lines = read_log(log_dir)
    assert len(lines) == 5 + 3
    assert lines[0] == TOP_BORDER
    assert lines[-1] == BOTTOM_BORDER
    assert len(lines[0]) == len(lines[-1])
    assert lines[1] == "┃ Session: work"
    assert re.match(r"^┃ Elapsed: \d+us$", lines[2])
    assert lines[3] == "┃"
    for i, line in enumerate(lines[4:-1]):
        assert line.startswith("┃ ")
        assert line.endswith(f" - message-{i}")
        assert " [I] " in line and "svc:work" not in line


def test_messages_below_write_level_stay_out_of_the_file(registry, log_dir, read_log, capsys):
    logger = registry.get_or_create("svc")
    logger.log_level = Level.DEBUG
    logger.write_level = Level.WARNING
    with logger.session("work") as s:
        s.info("chatter")
        s.warning("keep me")
    text = "\n".join(read_log(log_dir))
    assert "chatter" not in text
    assert "keep me" in text
    assert len(read_log(log_dir)) == 5 + 1
    out = capsys.readouterr().out
    assert "chatter" in out and "keep me" in out


def test_console_prints_in_call_order(registry, capsys):
    logger = registry.get_or_create("svc")
    with logger.session("work") as s:
        s.info("one")
        with s.session("child") as c:
            c.info("two")
        s.info("three")
    out = capsys.readouterr().out.splitlines()
    assert "svc:work" in out[0] and out[0].endswith("Session start")
    messages = [line.rsplit(" - ", 1)[1] for line in out if "Session" not in line]
    assert messages == ["one", "two", "three"]
    assert "Session end, Elapsed:" in out[-1]


def test_nested_report_sits_inside_parent(registry, log_dir, read_log):
    logger = registry.get_or_create("svc")
    with logger.session("parent") as p:
        p.info("before child")
        with p.session("child") as c:
            c.info("child-1")
            c.info("child-2")
    lines = read_log(log_dir)
    child_len = 5 + 2
    assert len(lines) == 5 + 1 + child_len
    assert lines[0] == TOP_BORDER and lines[-1] == BOTTOM_BORDER
    assert lines[4].endswith(" - before child")

    child = lines[5:-1]
    assert len(child) == child_len
    assert child[0].startswith("┃┏") and child[-1].startswith("┃┗")
    assert child[1] == "┃┃ Session: child"
    assert child[3] == "┃┃"
    assert child[4].startswith("┃┃ ") and child[4].endswith(" - child-1")
    for border in (child[0], child[-1]):
        assert len(border) == len(TOP_BORDER)


def test_border_width_constant_at_any_depth(registry, log_dir, read_log):
    logger = registry.get_or_create("svc")
    with logger.session("a") as a:
        with a.session("b") as b:
            with b.session("c") as c:
                with c.session("d") as d:
                    d.info("deep")
    lines = read_log(log_dir)
    borders = [line for line in lines if line.lstrip("┃").startswith(("┏", "┗"))]
    assert len(borders) == 8
    assert {len(line) for line in borders} == {len(TOP_BORDER)}
    assert any(line.startswith("┃┃┃┃ ") and line.endswith(" - deep") for line in lines)


def test_empty_child_collapses_inside_parent(registry, log_dir, read_log):
    logger = registry.get_or_create("svc")
    with logger.session("parent") as p:
        with p.session("quiet"):
            pass
    lines = read_log(log_dir)
    assert len(lines) == 5 + 1
    assert lines[4].startswith("┃ ")
    assert "svc:quiet - " in lines[4] and "Session end, Elapsed: " in lines[4]


def test_ease_on_empty_disabled_renders_box(registry, log_dir, read_log):
    logger = registry.get_or_create("svc")
    logger.ease_on_empty = False
    with logger.session("idle"):
        pass
    lines = read_log(log_dir)
    assert len(lines) == 5
    assert lines[0] == TOP_BORDER and lines[-1] == BOTTOM_BORDER


def test_empty_session_below_write_level_writes_nothing(registry, log_dir, read_log):
    logger = registry.get_or_create("svc")
    logger.write_level = Level.ERROR
    with logger.session("idle"):
        pass
    assert read_log(log_dir) == []


def test_completion_happens_once(registry, log_dir, read_log):
    logger = registry.get_or_create("svc")
    s = logger.session("work")
    s.info("only once")
    s.close()
    s.close()
    with s:
        pass
    assert s.died
    lines = read_log(log_dir)
    assert lines.count(TOP_BORDER) == 1
    assert sum("only once" in line for line in lines) == 1


def test_logging_after_completion_is_ignored(registry, log_dir, read_log, capsys):
    logger = registry.get_or_create("svc")
    with logger.session("work") as s:
        s.info("inside")
    capsys.readouterr()
    s.info("too late")
    assert capsys.readouterr().out == ""
    assert not any("too late" in line for line in read_log(log_dir))


def test_child_of_completed_session_fails(registry):
    logger = registry.get_or_create("svc")
    with logger.session("parent") as p:
        pass
    with pytest.raises(SessionDiedError) as excinfo:
        p.session("late")
    assert excinfo.value.kind is SessionErrorKind.SESSION_DIED


def test_grandchild_fails_once_grandparent_completed(registry, log_dir, read_log):
    logger = registry.get_or_create("svc")
    p = logger.session("parent")
    c = p.session("child")
    c.info("orphaned content")
    p.close()
    with pytest.raises(SessionDiedError):
        c.session("grandchild")
    # The child's report is not dropped when its parent finished first.
    c.close()
    text = "\n".join(read_log(log_dir))
    assert "Session: child" in text
    assert "orphaned content" in text


def test_disable_and_enable(registry, log_dir, read_log, capsys):
    logger = registry.get_or_create("svc")
    with logger.session("work") as s:
        s.disable()
        assert s.paused
        s.warning("hidden")
        s.enable()
        s.warning("shown")
    out = capsys.readouterr().out
    text = "\n".join(read_log(log_dir))
    assert "hidden" not in out and "hidden" not in text
    assert "shown" in out and "shown" in text


def test_fatal_inside_session_still_flushes(registry, log_dir, read_log):
    logger = registry.get_or_create("svc")
    with pytest.raises(FatalError):
        with logger.session("crash") as s:
            s.info("about to fail")
            s.fatal("boom")
    text = "\n".join(read_log(log_dir))
    assert "Session: crash" in text
    assert "[F]" in text and "boom" in text


def test_exception_still_completes_session(registry, log_dir, read_log):
    logger = registry.get_or_create("svc")
    with pytest.raises(KeyError):
        with logger.session("work") as s:
            s.info("partial")
            raise KeyError("missing")
    assert s.died
    assert any("partial" in line for line in read_log(log_dir))


def test_root_lines_can_precede_session_batch(registry, log_dir, read_log):
    logger = registry.get_or_create("svc")
    with logger.session("work") as s:
        s.info("inside session")
        logger.info("root while session open")
    lines = read_log(log_dir)
    assert lines[0].endswith(" - root while session open")
    assert lines[1] == TOP_BORDER


def test_render_box_nests_child_reports():
    child = render_box("c", 1, ["x"])
    lines = [line.text for line in render_box("p", 2, [child])]
    assert lines[4] == "┃" + TOP_BORDER[:-1]
    assert lines[5] == "┃┃ Session: c"
    assert lines[8] == "┃┃ x"
    assert lines[9] == "┃" + BOTTOM_BORDER[:-1]


def test_render_box_prefixes_every_line_of_a_message():
    lines = [line.text for line in render_box("p", 2, ["table:\n┗━ total 42\n┃ row"])]
    assert lines[4:7] == ["┃ table:", "┃ ┗━ total 42", "┃ ┃ row"]


def test_multiline_message_with_box_glyphs_survives_nesting(registry, log_dir, read_log):
    logger = registry.get_or_create("svc")
    with logger.session("parent") as p:
        with p.session("child") as c:
            c.info("table:\n┏━ header\n┗━ total 42")
    lines = read_log(log_dir)
    assert "┃┃ ┏━ header" in lines
    assert "┃┃ ┗━ total 42" in lines
    borders = [line for line in lines if line.lstrip("┃").startswith(("┏", "┗")) and "━━━" in line]
    assert {len(line) for line in borders} == {len(TOP_BORDER)}
    assert len(borders) == 4


def test_descendant_of_completed_ancestor_fails(registry):
    logger = registry.get_or_create("svc")
    a = logger.session("a")
    b = a.session("b")
    c = b.session("c")
    d = c.session("d")
    a.close()
    assert not b.died and not c.died and not d.died
    with pytest.raises(SessionDiedError) as excinfo:
        c.session("late")
    assert excinfo.value.kind is SessionErrorKind.SESSION_DIED
    with pytest.raises(SessionDiedError):
        d.session("later")
    for s in (d, c, b):
        s.close()


def test_live_ancestors_allow_deep_nesting(registry, log_dir, read_log):
    logger = registry.get_or_create("svc")
    with logger.session("a") as a:
        with a.session("b") as b:
            with b.session("c") as c:
                with c.session("d") as d:
                    d.info("four deep")
    assert any(line.endswith(" - four deep") for line in read_log(log_dir))
