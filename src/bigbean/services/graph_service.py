"""In-memory index of the word/combo bipartite graph."""
import logging
import threading
from typing import List, Optional, Tuple

import networkx as nx

from bigbean import monitoring
from bigbean.config import settings
from bigbean.services.vocabulary_store import VocabularyStore

logger = logging.getLogger(__name__)

# Values of the "bipartite" node attribute
WORD = 0
COMBO = 1


class GraphNotBuiltError(RuntimeError):
    """Raised when the graph is queried before build()."""


def build_membership_graph(memberships) -> nx.Graph:
    """Build a frozen bipartite graph from (word_id, combo_id) rows.

    Nodes are (side, id) pairs so word and combo ids never collide. Edges are
    added in id order, which makes shortest-path tie-breaks stable.
    """
    G = nx.Graph()
    for word_id, combo_id in sorted(memberships):
        G.add_node((WORD, word_id), bipartite=WORD)
        G.add_node((COMBO, combo_id), bipartite=COMBO)
        G.add_edge((WORD, word_id), (COMBO, combo_id))
    return nx.freeze(G)


class GraphService:
    """Adjacency index over memberships, with shortest-bridge search.

    The index is copy-on-rebuild: build() assembles a complete graph before
    swapping it in, so readers never observe a partial index.
    """

    def __init__(self, store: VocabularyStore, max_bridge_length: Optional[int] = None):
        """Initialize the service. Call build() before querying."""
        self.store = store
        if max_bridge_length is None:
            max_bridge_length = settings.scheduler.max_bridge_length
        self.max_bridge_length = max_bridge_length
        self._graph: Optional[nx.Graph] = None
        self._lock = threading.Lock()

    @property
    def is_built(self) -> bool:
        """Whether build() has completed at least once."""
        return self._graph is not None

    def build(self) -> None:
        """Scan every membership row and publish a new index."""
        with self._lock:
            G = build_membership_graph(self.store.list_memberships())
            self._graph = G
        monitoring.graph_rebuilds.inc()
        words = sum(1 for _, side in G.nodes(data="bipartite") if side == WORD)
        logger.info(f"Graph built: {words} words, {G.number_of_nodes() - words} combos")

    def rebuild(self) -> None:
        """Re-derive the index after memberships changed."""
        self.build()

    def _current(self) -> nx.Graph:
        G = self._graph
        if G is None:
            raise GraphNotBuiltError("Graph has not been built")
        return G

    def _neighbor_ids(self, node) -> Tuple[str, ...]:
        G = self._current()
        if node not in G:
            return ()
        return tuple(sorted(neighbor_id for _, neighbor_id in G.neighbors(node)))

    def combos_for(self, word_id: str) -> Tuple[str, ...]:
        """Get the ids of combos containing a word."""
        return self._neighbor_ids((WORD, word_id))

    def members_of(self, combo_id: str) -> Tuple[str, ...]:
        """Get the ids of words in a combo."""
        return self._neighbor_ids((COMBO, combo_id))

    def degree(self, word_id: str) -> int:
        """Get the number of combos containing a word."""
        G = self._current()
        node = (WORD, word_id)
        return G.degree(node) if node in G else 0

    def find_bridge(self, word_a: str, word_b: str) -> Optional[List[str]]:
        """Find the shortest sequence of combos leading from word_a to word_b.

        Returns None when either word is unknown or no bridge of at most
        max_bridge_length combos exists.
        """
        G = self._current()
        source, target = (WORD, word_a), (WORD, word_b)
        if source not in G or target not in G:
            return None

        shared = sorted(set(self.combos_for(word_a)) & set(self.combos_for(word_b)))
        if shared:
            monitoring.bridge_length.observe(1)
            return [shared[0]]

        # A bridge of n combos is a word-combo-...-word path of 2n edges
        paths = nx.single_source_shortest_path(G, source, cutoff=2 * self.max_bridge_length)
        path = paths.get(target)
        if path is None:
            logger.debug(f"No bridge from {word_a} to {word_b}")
            return None

        bridge = [node_id for side, node_id in path if side == COMBO]
        monitoring.bridge_length.observe(len(bridge))
        return bridge
