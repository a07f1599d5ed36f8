# chess_mistakes/core/move_tree.py
"""
An index-addressed arena for PGN move trees and the visitor that builds it.

`chess.pgn.read_game` normally builds a linked `GameNode` tree and drops a
variation at its first illegal move. The analyzer needs the opposite: every
SAN token is kept verbatim (legal or not) so that the walker can decide for
itself how to degrade, and the tree is stored flat so that replaying a
hypothetical line only ever copies a position, never the tree.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Union

import chess
import chess.pgn
import structlog

logger = structlog.get_logger(__name__)

ROOT_INDEX = 0


@dataclass(slots=True)
class MoveNode:
    """One node of the arena. The root node carries no move."""
    index: int
    parent: Optional[int]
    san: str = ""
    parsed: bool = True
    nags: List[int] = field(default_factory=list)
    starting_comments: List[str] = field(default_factory=list)
    comments: List[str] = field(default_factory=list)
    children: List[int] = field(default_factory=list)

    @property
    def main_child(self) -> Optional[int]:
        """The first child continues the main line."""
        return self.children[0] if self.children else None


@dataclass
class MoveTree:
    nodes: List[MoveNode] = field(default_factory=lambda: [MoveNode(index=ROOT_INDEX, parent=None)])

    @property
    def root(self) -> MoveNode:
        return self.nodes[ROOT_INDEX]

    def node(self, index: int) -> MoveNode:
        return self.nodes[index]

    def add_child(self, parent: int, san: str, parsed: bool = True) -> MoveNode:
        child = MoveNode(index=len(self.nodes), parent=parent, san=san, parsed=parsed)
        self.nodes.append(child)
        self.nodes[parent].children.append(child.index)
        return child

    def siblings(self, index: int) -> List[MoveNode]:
        """Alternatives to a main-line node, in document order."""
        parent = self.nodes[index].parent
        if parent is None:
            return []
        return [self.nodes[i] for i in self.nodes[parent].children if i != index]

    def line_from(self, index: int) -> Iterator[MoveNode]:
        """Yields `index` and then its main-line descendants."""
        current: Optional[int] = index
        while current is not None:
            node = self.nodes[current]
            yield node
            current = node.main_child

    def depth(self, index: int) -> int:
        """Number of plies on the main line starting at `index`."""
        return sum(1 for _ in self.line_from(index))

    def mainline(self) -> Iterator[MoveNode]:
        first = self.root.main_child
        if first is not None:
            yield from self.line_from(first)


@dataclass
class ParsedPgnGame:
    headers: Dict[str, str]
    tree: MoveTree
    result: Optional[str] = None
    errors: List[str] = field(default_factory=list)


class ArenaBuilder(chess.pgn.BaseVisitor[ParsedPgnGame]):
    """
    A `chess.pgn` visitor that records games into a `MoveTree`.

    Unparseable SAN tokens are stored as unparsed nodes (the reader is handed
    a null move so that it keeps consuming the variation) and reader errors
    are collected instead of raised. Comment placement follows the same rules
    as `chess.pgn.GameBuilder`: a comment right after a move belongs to that
    move, a comment opening a variation precedes its first move.
    """

    def begin_game(self) -> None:
        self.headers: Dict[str, str] = {}
        self.tree = MoveTree()
        self.errors: List[str] = []
        self.game_result: Optional[str] = None
        self._stack: List[int] = [ROOT_INDEX]
        self._in_variation = False
        self._starting_comments: List[str] = []
        self._pending_token: Optional[str] = None

    def visit_header(self, tagname: str, tagvalue: str) -> None:
        self.headers[tagname] = tagvalue

    def parse_san(self, board: chess.Board, san: str) -> chess.Move:
        self._pending_token = san
        try:
            return super().parse_san(board, san)
        except ValueError:
            logger.debug("Keeping unparseable SAN token.", san=san, fen=board.fen())
            return chess.Move.null()

    def visit_move(self, board: chess.Board, move: chess.Move) -> None:
        token = self._pending_token or ""
        self._pending_token = None
        parsed = bool(move)
        san = board.san(move) if parsed else token
        node = self.tree.add_child(self._stack[-1], san, parsed=parsed)
        node.starting_comments.extend(self._starting_comments)
        self._starting_comments = []
        self._stack[-1] = node.index
        self._in_variation = True

    def visit_comment(self, comment: Union[str, List[str]]) -> None:
        comments = [comment] if isinstance(comment, str) else list(comment)
        current = self.tree.node(self._stack[-1])
        if self._in_variation or (current.parent is None and not current.children):
            current.comments.extend(comments)
        else:
            self._starting_comments.extend(comments)

    def visit_nag(self, nag: int) -> None:
        self.tree.node(self._stack[-1]).nags.append(nag)

    def begin_variation(self) -> None:
        parent = self.tree.node(self._stack[-1]).parent
        self._stack.append(parent if parent is not None else ROOT_INDEX)
        self._in_variation = False

    def end_variation(self) -> None:
        self._stack.pop()
        self._in_variation = True
        self._starting_comments = []

    def visit_result(self, result: str) -> None:
        self.game_result = result

    def handle_error(self, error: Exception) -> None:
        logger.warning("PGN reader error.", error=str(error))
        self.errors.append(str(error))

    def result(self) -> ParsedPgnGame:
        return ParsedPgnGame(
            headers=dict(self.headers), tree=self.tree,
            result=self.game_result, errors=list(self.errors),
        )
