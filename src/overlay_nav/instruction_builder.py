# instruction_builder.py
# Turns a raw node path into human-readable turn-by-turn instructions.

from typing import Dict, List, Optional, Sequence

from .geo_utils import classify_turn, turn_angle
from .graph import NavigationGraph
from .models import Instruction, TurnDirection


TEMPLATES: Dict[TurnDirection, str] = {
    TurnDirection.START:        "Start at {label}",
    TurnDirection.STRAIGHT:     "Continue straight to {label}",
    TurnDirection.SLIGHT_LEFT:  "Turn slight left to {label}",
    TurnDirection.LEFT:         "Turn left at {label}",
    TurnDirection.SHARP_LEFT:   "Turn sharp left at {label}",
    TurnDirection.SLIGHT_RIGHT: "Turn slight right to {label}",
    TurnDirection.RIGHT:        "Turn right at {label}",
    TurnDirection.SHARP_RIGHT:  "Turn sharp right at {label}",
    TurnDirection.U_TURN:       "Make U-turn at {label}",
    TurnDirection.ARRIVE:       "Arrive at {label}",
}


def instruction_text(direction: TurnDirection, label: str) -> str:
    return TEMPLATES[direction].format(label=label)


def synthesize(
    path: Sequence[str],
    graph: NavigationGraph,
    leg_distances: Optional[Sequence[float]] = None,
) -> List[Instruction]:
    """
    Build one Instruction per node of the path.

    The first node is "start", the last "arrive", interior nodes are
    classified from the turn angle formed with their neighbours. A one-node
    path yields a single "arrive" instruction.

    Args:
        path:          Node ids from start to goal.
        graph:         Graph the path was planned on.
        leg_distances: Cost of each leg (len(path) - 1 values). Looked up
                       from the graph's cheapest edge when omitted.

    Returns:
        List of Instruction objects, same length as path.
    """
    if not path:
        return []

    if leg_distances is None:
        leg_distances = [
            graph.edge_distance(path[i], path[i + 1]) or 0.0
            for i in range(len(path) - 1)
        ]

    instructions: List[Instruction] = []
    distance_from_start = 0.0
    last = len(path) - 1

    for i, node_id in enumerate(path):
        node = graph.nodes[node_id]

        if i == last:
            direction = TurnDirection.ARRIVE
        elif i == 0:
            direction = TurnDirection.START
        else:
            angle = turn_angle(
                graph.position(path[i - 1]),
                node.position,
                graph.position(path[i + 1]),
            )
            direction = classify_turn(angle)

        instructions.append(Instruction(
            node_id=node_id,
            text=instruction_text(direction, node.label),
            distance_from_start=distance_from_start,
            direction=direction,
        ))

        if i < last:
            distance_from_start += leg_distances[i]

    return instructions
