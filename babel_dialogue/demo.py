"""Demo cast: a couple of Babel townsfolk for the console launcher and tests."""

from babel_dialogue.models import NPC, ScheduleEntry
from babel_dialogue.registry import NPCRegistry


def teddy() -> NPC:
    return NPC(
        id=8,
        name="Teddy",
        job="Cat",
        greeting=["What do you want? Make it quick."],
        description=(
            "Teddy, who insists on being called Theodore, is an intelligent but aloof cat "
            "who roams Babel on his own terms. He has no official owner but tolerates Ronny, "
            "who feeds him scraps. Though he claims to despise Garbanzo, he secretly watches "
            "out for him, making sure the dog doesn't get into trouble. Teddy enjoys observing "
            "the town, judging humans from a safe distance, and engaging in silent intellectual "
            "battles with Esmeralda."
        ),
        personality=("Aloof", "Intelligent", "Secretly Caring", "Judgmental"),
        schedule=[
            ScheduleEntry(waypoint="kitchen-door", time=8, location="Restaurant", coordinates=(2, 2)),
            ScheduleEntry(waypoint="fountain", time=14, location="Overworld", coordinates=(6, 6)),
        ],
        current_location="Restaurant",
        current_coordinates=(2, 2),
    )


def esmeralda() -> NPC:
    return NPC(
        id=11,
        name="Esmeralda",
        job="Pharmacist",
        greeting=["You seek knowledge... or perhaps something more? Hmm... interesting."],
        description=(
            "Esmeralda is the town's enigmatic pharmacist, known for her deep knowledge of both "
            "modern medicine and mysterious herbal remedies. Rumors persist that she might be a "
            "witch, but she neither confirms nor denies them. She speaks in cryptic riddles and "
            "often knows things she was never told, adding to her air of mystery. She takes care "
            "of her nephew Ace who was sent to Babel to overcome behavioral issues."
        ),
        personality=("Mysterious", "Aloof", "Intelligent", "Cryptic"),
        schedule=[
            ScheduleEntry(waypoint="counter", time=9, location="Pharmacy", coordinates=(2, 2)),
            ScheduleEntry(waypoint="herb-garden", time=17, location="Overworld", coordinates=(8, 8)),
        ],
        current_location="Pharmacy",
        current_coordinates=(2, 2),
    )


def create_demo_registry() -> NPCRegistry:
    registry = NPCRegistry()
    registry.register(teddy())
    registry.register(esmeralda())
    return registry
