"""Tests for the default node."""

import pytest
import typer

from nodekit.node import Node, NodeI, new_node


@pytest.mark.unit
class TestNode:
    """Test root command ownership and execution."""

    def test_starts_without_root_command(self) -> None:
        node = new_node()
        assert node.root_cmd is None
        assert isinstance(node, NodeI)

    def test_run_without_root_command_raises(self) -> None:
        with pytest.raises(RuntimeError, match="no root command"):
            Node().run([])

    def test_run_executes_root_command(self) -> None:
        calls: list[str] = []
        root = typer.Typer(name="mynode")

        @root.command(name="hello")
        def hello(name: str) -> None:
            calls.append(name)

        @root.command(name="bye")
        def bye() -> None:
            pass

        node = Node()
        node.set_root_cmd(root)
        node.run(["hello", "world"], standalone_mode=False)

        assert node.root_cmd is root
        assert calls == ["world"]
