"""Tests for MermaidFlowBuilder."""

import pytest

from pwmermaid.builder import BuilderState, MermaidFlowBuilder, render_label
from pwmermaid.classifier import Action, ActionKind
from pwmermaid.config import THEME_DIRECTIVE, Settings


def start(name, manual=False):
    return Action(kind=ActionKind.TEST_START, target=name, is_manual=manual)


def goto(url):
    return Action(kind=ActionKind.NAVIGATE, target=url)


def click(selector):
    return Action(kind=ActionKind.CLICK, target=selector)


def fill(selector, text):
    return Action(kind=ActionKind.FILL, target=selector, value=text)


def check(detail, predicate):
    return Action(kind=ActionKind.ASSERT, target=detail, value=predicate)


def build(actions, **kwargs):
    builder = MermaidFlowBuilder(**kwargs)
    for action in actions:
        builder.add(action)
    return builder, builder.finish()


def declarations(text):
    return [line.strip() for line in text.splitlines() if line.strip().endswith('")')]


def edge_lines(text):
    return [line.strip() for line in text.splitlines() if "-->" in line]


class TestLabels:

    def test_navigate(self):
        assert render_label(goto("x.com")) == "fa:fa-globe Navigate to x.com"

    def test_click(self):
        assert render_label(click("#a")) == "fa:fa-mouse-pointer Click #a"

    def test_fill_keeps_blank_value(self):
        assert render_label(fill("#u", " ")) == "fa:fa-keyboard Fill #u with ' '"

    def test_assertion(self):
        assert render_label(check("'Error'", "toBeVisible")) == "fa:fa-check Assertion: 'Error' toBeVisible"

    def test_double_quotes_replaced(self):
        assert '"' not in render_label(click('text="Go"'))


class TestStructure:

    def test_header(self):
        _, text = build([])
        assert text.splitlines()[:2] == [THEME_DIRECTIVE, "flowchart TD"]

    def test_subgraph_open_close(self):
        builder, text = build([start("a"), goto("x.com")])
        lines = text.splitlines()
        assert '    subgraph T1 ["a"]' in lines
        assert lines[-1] == "    end"
        assert builder.state is BuilderState.CLOSED

    def test_node_and_edge_lines(self):
        _, text = build([start("a"), goto("x.com"), click("#a")])
        assert '        B1("fa:fa-globe Navigate to x.com")' in text.splitlines()
        assert '        C2("fa:fa-mouse-pointer Click #a")' in text.splitlines()
        assert edge_lines(text) == ["B1 --> C2"]

    def test_manual_label(self):
        _, text = build([start("empty user", manual=True)])
        assert 'subgraph T1 ["Manual test - empty user"]' in text

    def test_manual_prefix_from_settings(self):
        _, text = build([start("x", manual=True)], settings=Settings(manual_prefix="[M] "))
        assert 'subgraph T1 ["[M] x"]' in text

    def test_start_closes_open_subgraph(self):
        builder = MermaidFlowBuilder()
        builder.add(start("a"))
        builder.add(start("b"))
        text = builder.finish()
        assert text.splitlines().count("    end") == 2
        assert builder.subgraph_count == 2

    def test_end_test_when_idle_is_noop(self):
        builder = MermaidFlowBuilder()
        builder.end_test()
        builder.add(start("a"))
        builder.end_test()
        builder.end_test()
        assert builder.finish().splitlines().count("    end") == 1

    def test_top_level_steps(self):
        _, text = build([goto("x.com"), click("#a")])
        assert '    B1("fa:fa-globe Navigate to x.com")' in text.splitlines()
        assert "    B1 --> C2" in text.splitlines()

    def test_add_after_finish_raises(self):
        builder = MermaidFlowBuilder()
        builder.finish()
        with pytest.raises(RuntimeError):
            builder.add(goto("x.com"))

    def test_unknown_dedup_scope(self):
        with pytest.raises(ValueError):
            MermaidFlowBuilder(dedup_scope="file")


class TestDeduplication:

    def test_repeated_step_reuses_node(self):
        builder, text = build([
            start("a"),
            fill("#u", "bob"),
            click("#next"),
            fill("#u", "bob"),
        ])
        assert declarations(text) == [
            "D1(\"fa:fa-keyboard Fill #u with 'bob'\")",
            'C2("fa:fa-mouse-pointer Click #next")',
        ]
        assert edge_lines(text) == ["D1 --> C2", "C2 --> D1"]
        assert builder.node_count == 2

    def test_different_fill_value_is_new_node(self):
        _, text = build([start("a"), fill("#u", "bob"), fill("#u", "alice")])
        assert len(declarations(text)) == 2

    def test_consecutive_repeat_adds_no_self_edge(self):
        _, text = build([start("a"), click("#a"), click("#a")])
        assert len(declarations(text)) == 1
        assert edge_lines(text) == []

    def test_duplicate_edge_not_repeated(self):
        _, text = build([start("a"), click("#a"), click("#b"), click("#a"), click("#b")])
        assert edge_lines(text) == ["C1 --> C2", "C2 --> C1"]

    def test_assertions_never_deduplicated(self):
        builder, text = build([
            start("a"),
            goto("x.com"),
            check("'Error'", "toBeVisible"),
            check("'Error'", "toBeVisible"),
        ])
        assert text.count("Assertion: 'Error' toBeVisible") == 2
        assert edge_lines(text) == ["B1 --> E2", "E2 --> E3"]
        assert builder.edge_count == 2

    def test_test_scope_redeclares_per_subgraph(self):
        _, text = build([start("a"), goto("x.com"), start("b"), goto("x.com")])
        assert declarations(text) == [
            'B1("fa:fa-globe Navigate to x.com")',
            'B2("fa:fa-globe Navigate to x.com")',
        ]

    def test_run_scope_reuses_across_subgraphs(self):
        _, text = build(
            [start("a"), goto("x.com"), click("#a"), start("b"), goto("x.com"), click("#b")],
            dedup_scope="run",
        )
        assert text.count("Navigate to x.com") == 1
        assert edge_lines(text) == ["B1 --> C2", "B1 --> C3"]

    def test_first_step_has_no_edge_from_previous_test(self):
        _, text = build([start("a"), goto("x.com"), click("#a"), start("b"), click("#z")])
        assert edge_lines(text) == ["B1 --> C2"]

    def test_step_after_test_is_declared_at_top_level(self):
        builder = MermaidFlowBuilder()
        builder.add(start("a"))
        builder.add(goto("x.com"))
        builder.end_test()
        builder.add(goto("x.com"))
        text = builder.finish()
        lines = text.splitlines()
        assert '        B1("fa:fa-globe Navigate to x.com")' in lines
        assert '    B2("fa:fa-globe Navigate to x.com")' in lines

    def test_computed_steps_are_never_merged(self):
        opaque_goto = Action(kind=ActionKind.NAVIGATE, target="", opaque=True)
        builder, text = build([start("a"), opaque_goto, click("#a"), opaque_goto])
        assert declarations(text) == [
            'B1("fa:fa-globe Navigate to ")',
            'C2("fa:fa-mouse-pointer Click #a")',
            'B3("fa:fa-globe Navigate to ")',
        ]
        assert edge_lines(text) == ["B1 --> C2", "C2 --> B3"]
        assert builder.node_count == 3


class TestControlCharacters:

    def test_newline_in_fill_value(self):
        label = render_label(fill("#bio", "line1\nline2"))
        assert label == "fa:fa-keyboard Fill #bio with 'line1 line2'"

    @pytest.mark.parametrize("raw", ["a\r\nb", "a\tb", "a\x00b", "a\x7fb"])
    def test_control_runs_collapse_to_one_space(self, raw):
        assert render_label(click(raw)) == "fa:fa-mouse-pointer Click a b"

    def test_test_name_with_newline_stays_on_one_line(self):
        _, text = build([start("two\nlines"), click("#a")])
        assert '    subgraph T1 ["two lines"]' in text.splitlines()
