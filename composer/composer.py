"""Composer: expands a root segment into a full composition tree."""

import logging
from typing import List, Optional

from composer.composition import Composition
from composer.config import ComposerOptions, get_config
from composer.context import CompositionContext
from composer.exceptions import CompositionAbortedError, RenderError
from composer.render import RenderEngine
from composer.seeding import child_seed, random_seed
from composer.segment import Segment
from composer.tree import NodeState, RenderTree, TreeNode

logger = logging.getLogger(__name__)


class Composer:
    """Orchestrates rendering of compositions with a RenderEngine.

    Expansion is pre-order depth-first: once a node's children are produced
    they are fully expanded, first child first, before the node's next
    sibling. This order defines what each render call's context can see and
    keeps seeded rendering reproducible.
    """

    def __init__(self, engine: RenderEngine, options: Optional[ComposerOptions] = None):
        """Initialize composer.

        Args:
            engine: Renderers used to expand segments
            options: Composition options (defaults from configuration)
        """
        self.engine = engine
        self.options = options or ComposerOptions.from_config()
        logger.info(
            f"Composer initialized with {len(engine)} renderers "
            f"({self.options.ticks_per_beat} ticks per beat)"
        )

    @property
    def ticks_per_beat(self) -> int:
        return self.options.ticks_per_beat

    def compose(self, root: Segment, seed: Optional[int] = None) -> Composition:
        """Expand ``root`` until no pending segment has a renderer.

        Args:
            root: Root segment (not modified; a copy is attached)
            seed: Global seed; defaults to the configured seed, else random

        Returns:
            The fully expanded Composition

        Raises:
            CompositionAbortedError: If any renderer raises a RenderError;
                no partial composition is produced
        """
        if seed is None:
            seed = get_config().default_seed
        if seed is None:
            seed = random_seed()
        seed = int(seed)

        logger.info(
            f"Composing {root.discriminant} over {root.timing} with seed {seed}",
            extra={"seed": seed, "discriminant": root.discriminant},
        )

        tree = RenderTree()
        pending: List[TreeNode] = [tree.add(root.copy(), parent=None, seed=seed)]

        while pending:
            node = pending.pop()
            tree.visit(node)
            children = self._render(tree, node)

            if children is None:
                node.state = NodeState.EXPANDED_LEAF
                continue

            added = [
                tree.add(child, parent=node, seed=child_seed(node.seed, index, child.name))
                for index, child in enumerate(children)
            ]
            node.state = NodeState.EXPANDED_INTERNAL
            # Reversed so the first child is expanded next
            pending.extend(reversed(added))

            logger.debug(
                f"Rendered {node.segment.discriminant} {node.segment.timing} "
                f"into {len(added)} children",
                extra={
                    "segment_id": node.id,
                    "discriminant": node.segment.discriminant,
                    "depth": node.depth,
                },
            )

        logger.info(
            f"Finished composing: {len(tree)} segments",
            extra={"seed": seed, "node_count": len(tree)},
        )
        return Composition(tree, self.options, seed)

    def _render(self, tree: RenderTree, node: TreeNode) -> Optional[List[Segment]]:
        context = CompositionContext(tree, node, self.options.ticks_per_beat)
        try:
            return self.engine.render(node.segment, context)
        except RenderError as e:
            logger.error(
                f"Rendering {node.segment.discriminant} {node.segment.timing} failed: {e}",
                extra={
                    "segment_id": node.id,
                    "discriminant": node.segment.discriminant,
                    "depth": node.depth,
                },
            )
            raise CompositionAbortedError(e, node.id, node.segment.discriminant) from e
