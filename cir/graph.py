import networkx as nx # type: ignore
from typing import Any, Dict, List, Optional

class CIRGraph:
    """
    Typed multi-graph of parsed Java type declarations.
    Nodes: TypeDecl (parsed, payload is the declaration record),
           ExternalType (referenced but not parsed, payload is None)
    Edges: INHERITS (class -> superclass),
           IMPLEMENTS (class -> interface, interface -> superinterface)
    Out-edges keep insertion order, which is source declaration order.
    """
    def __init__(self) -> None:
        self.g = nx.MultiDiGraph()

    def add_node(self, node_id: str, kind: str, payload: Any) -> None:
        self.g.add_node(node_id, kind=kind, payload=payload)

    def add_edge(self, src: str, dst: str, etype: str, **attrs: Any) -> None:
        if dst not in self.g:
            self.g.add_node(dst, kind="ExternalType", payload=None)
        self.g.add_edge(src, dst, etype=etype, **attrs)

    def has_type(self, node_id: str) -> bool:
        return node_id in self.g and self.g.nodes[node_id].get("kind") == "TypeDecl"

    def payload(self, node_id: str) -> Any:
        if node_id not in self.g:
            return None
        return self.g.nodes[node_id].get("payload")

    def targets(self, node_id: str, etype: str) -> List[str]:
        if node_id not in self.g:
            return []
        return [dst for _, dst, data in self.g.out_edges(node_id, data=True) if data.get("etype") == etype]

    def superclass(self, node_id: str) -> Optional[str]:
        parents = self.targets(node_id, "INHERITS")
        return parents[0] if parents else None

    def superclass_chain(self, node_id: str) -> List[str]:
        """
        Superclasses of node_id, nearest first, ending at the first type
        that is not parsed (its id is still included).
        """
        chain: List[str] = []
        seen = {node_id}
        current = self.superclass(node_id)
        while current is not None and current not in seen:
            chain.append(current)
            seen.add(current)
            if not self.has_type(current):
                break
            current = self.superclass(current)
        return chain

    def superinterfaces(self, node_id: str) -> List[str]:
        """
        Breadth-first walk over IMPLEMENTS edges, starting from node_id.
        Each interface appears once, in discovery order.
        """
        ordered: List[str] = []
        seen = {node_id}
        queue = [node_id]
        while queue:
            current = queue.pop(0)
            for dst in self.targets(current, "IMPLEMENTS"):
                if dst in seen:
                    continue
                seen.add(dst)
                ordered.append(dst)
                queue.append(dst)
        return ordered

    def hierarchy_cycle(self, node_id: str) -> Optional[List[str]]:
        """
        Returns the ids on a supertype cycle reachable from node_id, if any.
        Only malformed sources produce one.
        """
        try:
            edges = nx.find_cycle(self.g, source=node_id)
        except nx.NetworkXNoCycle:
            return None
        return [src for src, _dst, *_ in edges]

    def to_debug_json(self) -> Dict[str, Any]:
        """
        Convert graph to JSON-like dict for debugging / API responses.
        """
        nodes = []
        for node_id, data in self.g.nodes(data=True):
            payload = data.get("payload")
            attrs = {}
            if payload is not None:
                attrs = {
                    "name": payload.name,
                    "kind": payload.kind,
                    "package": payload.package,
                    "modifiers": sorted(payload.modifiers),
                    "source_file": payload.source_file,
                }
            nodes.append({
                "id": node_id,
                "kind": data.get("kind"),
                "attrs": attrs,
            })

        edges = []
        for src, dst, data in self.g.edges(data=True):
            edges.append({
                "src": src,
                "dst": dst,
                "type": data.get("etype"),
            })

        return {"nodes": nodes, "edges": edges}
