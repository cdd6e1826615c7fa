"""Tests for the replay chain."""

import numpy as np
import pytest
from corticalq.replay import ReplayChain, Transition, argmax_action


def make_transition(tag: float, values=(0.0, 0.0), action: int = 0) -> Transition:
    """Transition whose reward doubles as a monotonically increasing tag."""
    return Transition(
        state=np.array([tag]),
        exploratory_action=action,
        greedy_action=argmax_action(np.array(values)),
        reward=tag,
        action_values=np.array(values, dtype=np.float64),
    )


class TestArgmaxAction:
    """Test cases for argmax_action."""

    def test_largest_value(self):
        """Test that the index of the largest value is returned."""
        assert argmax_action(np.array([0.1, 0.7, 0.3])) == 1

    def test_ties_pick_lowest_index(self):
        """Test that ties resolve to the lowest index."""
        assert argmax_action(np.array([0.5, 0.9, 0.9, 0.2])) == 1
        assert argmax_action(np.zeros(3)) == 0


class TestTransition:
    """Test cases for Transition."""

    def test_owns_its_arrays(self):
        """Test that a transition copies the arrays it is built from."""
        values = np.array([1.0, 2.0])
        state = np.array([0.5])
        transition = Transition(
            state=state,
            exploratory_action=0,
            greedy_action=1,
            reward=0.0,
            action_values=values,
        )

        values[0] = 10.0
        state[0] = 10.0

        assert transition.action_values[0] == 1.0
        assert transition.state[0] == 0.5

    def test_target_value(self):
        """Test that the target is the value of the exploratory action."""
        transition = make_transition(0.0, values=(0.3, 0.8), action=0)

        assert transition.target_value == pytest.approx(0.3)


class TestReplayChain:
    """Test cases for ReplayChain."""

    def test_grows_until_capacity(self):
        """Test that k pushes give length k while k <= capacity."""
        chain = ReplayChain(capacity=5)
        for k in range(1, 6):
            chain.push(make_transition(float(k)))
            assert len(chain) == k

    def test_fifo_eviction(self):
        """Test that only the most recent transitions survive, newest first."""
        chain = ReplayChain(capacity=4)
        for k in range(1, 11):
            chain.push(make_transition(float(k)))

        assert len(chain) == 4
        assert [t.reward for t in chain] == [10.0, 9.0, 8.0, 7.0]

    def test_push_returns_evicted(self):
        """Test that push reports the transitions that fell off the back."""
        chain = ReplayChain(capacity=2)
        first = make_transition(1.0)
        chain.push(first)
        chain.push(make_transition(2.0))

        evicted = chain.push(make_transition(3.0))
        assert len(evicted) == 1
        assert evicted[0] is first
        assert chain.push(make_transition(4.0))[0].reward == 2.0

    def test_indexing(self):
        """Test positional access, front is newest."""
        chain = ReplayChain(capacity=3)
        for k in range(3):
            chain.push(make_transition(float(k)))

        assert chain[0].reward == 2.0
        assert chain[2].reward == 0.0

    def test_propagate_geometric_trace(self):
        """Test that the k-th transition receives decay**k of the error."""
        chain = ReplayChain(capacity=10)
        for k in range(3):
            chain.push(make_transition(float(k), values=(0.0, 0.0), action=1))

        chain.propagate(error=1.0, trace_decay=0.5)

        shares = [t.action_values[1] for t in chain]
        assert shares == pytest.approx([0.5, 0.25, 0.125])
        assert all(t.action_values[0] == 0.0 for t in chain)

    def test_propagate_updates_greedy_action(self):
        """Test that the greedy action follows the updated values."""
        chain = ReplayChain(capacity=10)
        chain.push(make_transition(0.0, values=(0.5, 0.4), action=1))
        assert chain[0].greedy_action == 0

        chain.propagate(error=1.0, trace_decay=0.5)

        assert chain[0].action_values[1] == pytest.approx(0.9)
        assert chain[0].greedy_action == 1

    def test_propagate_negative_error(self):
        """Test that negative errors lower values and can flip the greedy action back."""
        chain = ReplayChain(capacity=10)
        chain.push(make_transition(0.0, values=(0.5, 0.6), action=1))

        chain.propagate(error=-1.0, trace_decay=0.5)

        assert chain[0].action_values[1] == pytest.approx(0.1)
        assert chain[0].greedy_action == 0

    def test_zero_decay_leaves_chain_alone(self):
        """Test that a zero trace decay changes nothing."""
        chain = ReplayChain(capacity=10)
        chain.push(make_transition(0.0, values=(0.2, 0.3), action=0))

        chain.propagate(error=5.0, trace_decay=0.0)

        np.testing.assert_array_equal(chain[0].action_values, [0.2, 0.3])

    def test_sample_indices_in_range(self, rng):
        """Test that samples are drawn with replacement within the chain."""
        chain = ReplayChain(capacity=10)
        chain.push(make_transition(0.0))
        chain.push(make_transition(1.0))

        indices = chain.sample_indices(rng, 50)

        assert indices.shape == (50,)
        assert set(indices.tolist()) <= {0, 1}

    def test_clear(self):
        """Test clearing the chain."""
        chain = ReplayChain(capacity=3)
        chain.push(make_transition(0.0))
        chain.clear()

        assert len(chain) == 0
