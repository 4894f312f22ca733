"""
Unit tests for the workflow definition type.
"""

import pytest

from inventory_kernel.domain.workflow import Transition, Workflow


def _workflow(**overrides):
    kwargs = dict(
        name="test",
        description="",
        initial_state="a",
        states=("a", "b", "c"),
        transitions=(
            Transition("a", "b", action="go"),
            Transition("b", "c", action="finish"),
        ),
        terminal_states=("c",),
    )
    kwargs.update(overrides)
    return Workflow(**kwargs)


class TestWorkflowValidation:

    def test_valid(self):
        wf = _workflow()
        assert wf.transition_for("a", "go").to_state == "b"

    def test_unknown_initial_state(self):
        with pytest.raises(ValueError, match="initial state"):
            _workflow(initial_state="z")

    def test_transition_to_unknown_state(self):
        with pytest.raises(ValueError, match="unknown state"):
            _workflow(transitions=(Transition("a", "z", action="go"),))

    def test_terminal_state_cannot_transition(self):
        with pytest.raises(ValueError, match="terminal"):
            _workflow(transitions=(Transition("c", "a", action="reopen"),))

    def test_duplicate_action_from_same_state(self):
        with pytest.raises(ValueError, match="duplicate"):
            _workflow(transitions=(
                Transition("a", "b", action="go"),
                Transition("a", "c", action="go"),
            ))


class TestWorkflowQueries:

    def test_missing_transition_is_none(self):
        assert _workflow().transition_for("b", "go") is None

    def test_allowed_actions(self):
        assert _workflow().allowed_actions("a") == ("go",)
        assert _workflow().allowed_actions("c") == ()

    def test_is_terminal(self):
        wf = _workflow()
        assert wf.is_terminal("c")
        assert not wf.is_terminal("a")
