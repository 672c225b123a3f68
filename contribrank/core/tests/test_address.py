"""Tests for node and edge addresses."""

import pytest

from contribrank.core.address import EdgeAddress, NodeAddress, parse_address


class TestNodeAddress:
    def test_from_parts_and_to_parts(self):
        address = NodeAddress.from_parts("github", "ISSUE", "42")
        assert address.parts == ("github", "ISSUE", "42")
        assert address.to_parts() == ["github", "ISSUE", "42"]

    def test_list_parts_are_normalized_to_tuple(self):
        address = NodeAddress(["github", "USER"])
        assert address == NodeAddress(("github", "USER"))
        assert hash(address) == hash(NodeAddress(("github", "USER")))

    def test_nul_in_part_rejected(self):
        with pytest.raises(ValueError):
            NodeAddress.from_parts("bad\0part")

    def test_non_string_part_rejected(self):
        with pytest.raises(TypeError):
            NodeAddress((1, 2))

    def test_ordering_is_partwise(self):
        a = NodeAddress.from_parts("a")
        ab = NodeAddress.from_parts("a", "b")
        a_b_joined = NodeAddress.from_parts("ab")
        b = NodeAddress.from_parts("b")

        assert sorted([b, a_b_joined, ab, a]) == [a, ab, a_b_joined, b]

    def test_empty_sorts_first(self):
        assert NodeAddress.empty < NodeAddress.from_parts("")
        assert NodeAddress.empty < NodeAddress.from_parts("a")

    def test_has_prefix(self):
        issue = NodeAddress.from_parts("github", "ISSUE", "42")
        assert issue.has_prefix(NodeAddress.empty)
        assert issue.has_prefix(NodeAddress.from_parts("github"))
        assert issue.has_prefix(NodeAddress.from_parts("github", "ISSUE"))
        assert issue.has_prefix(issue)
        # Part boundaries matter, not raw characters
        assert not issue.has_prefix(NodeAddress.from_parts("git"))
        assert not issue.has_prefix(NodeAddress.from_parts("github", "ISSUE", "4"))

    def test_has_prefix_rejects_other_kind(self):
        with pytest.raises(TypeError):
            NodeAddress.from_parts("a").has_prefix(EdgeAddress.from_parts("a"))

    def test_append(self):
        base = NodeAddress.from_parts("github")
        assert base.append("USER", "steven") == NodeAddress.from_parts(
            "github", "USER", "steven"
        )
        assert base.parts == ("github",)

    def test_str_joins_parts(self):
        assert str(NodeAddress.from_parts("github", "USER")) == "github/USER"


class TestEdgeAddress:
    def test_node_and_edge_addresses_differ(self):
        assert NodeAddress.from_parts("x") != EdgeAddress.from_parts("x")
        assert NodeAddress.from_parts("x").canonical != EdgeAddress.from_parts("x").canonical

    def test_cross_kind_ordering_unsupported(self):
        with pytest.raises(TypeError):
            NodeAddress.from_parts("x") < EdgeAddress.from_parts("x")


def test_parse_address():
    assert parse_address(NodeAddress, "") == NodeAddress.empty
    assert parse_address(EdgeAddress, "github/AUTHORS") == EdgeAddress.from_parts(
        "github", "AUTHORS"
    )
