"""
Achievement definitions (static). Used to enrich achievement_earned feed items; earned rows
in user_achievements only carry the id and tier.
"""

ACHIEVEMENTS: dict[str, dict] = {
    "trick_master": {
        "id": "trick_master",
        "name": "Trick Master",
        "icon": "🏆",
        "description": "Master tricks across all categories, from your first trick all the way to 50.",
        "type": "automatic",
        "tiers": {"bronze": 1, "silver": 10, "gold": 25, "platinum": 50},
        "category": "tricks",
    },
    "knowledge_seeker": {
        "id": "knowledge_seeker",
        "name": "Knowledge Seeker",
        "icon": "📚",
        "description": "Read articles in the Learn section. Mark articles as read to track your progress.",
        "type": "automatic",
        "tiers": {"bronze": 1, "silver": 5, "gold": 15, "platinum": 30},
        "category": "articles",
    },
    "event_enthusiast": {
        "id": "event_enthusiast",
        "name": "Event Enthusiast",
        "icon": "📅",
        "description": "Join sessions and events. The more you ride with us, the higher your tier.",
        "type": "automatic",
        "tiers": {"bronze": 1, "silver": 5, "gold": 15, "platinum": 30},
        "category": "events",
    },
    "loyal_friend": {
        "id": "loyal_friend",
        "name": "Loyal Friend",
        "icon": "💜",
        "description": "Support the club by making purchases in the shop.",
        "type": "automatic",
        "tiers": {"bronze": 1, "silver": 5, "gold": 15, "platinum": 30},
        "category": "orders",
    },
    "veteran": {
        "id": "veteran",
        "name": "Veteran",
        "icon": "⏳",
        "description": "Tracks how many days you have been a member.",
        "type": "automatic",
        "tiers": {"bronze": 1, "silver": 30, "gold": 90, "platinum": 365},
        "category": "account",
    },
    "surface_pro": {
        "id": "surface_pro",
        "name": "Surface Pro",
        "icon": "🌊",
        "description": "Master surface tricks like 180s, 360s and other on-water rotations.",
        "type": "automatic",
        "tiers": {"bronze": 1, "silver": 3, "gold": 6, "platinum": 10},
        "category": "tricks_surface",
    },
    "air_acrobat": {
        "id": "air_acrobat",
        "name": "Air Acrobat",
        "icon": "✈️",
        "description": "Master air tricks including jumps, flips and inversions off the wake.",
        "type": "automatic",
        "tiers": {"bronze": 1, "silver": 3, "gold": 6, "platinum": 10},
        "category": "tricks_air",
    },
    "rail_rider": {
        "id": "rail_rider",
        "name": "Rail Rider",
        "icon": "🛹",
        "description": "Master grinds, slides and rail combos at the park.",
        "type": "automatic",
        "tiers": {"bronze": 1, "silver": 2, "gold": 4, "platinum": 6},
        "category": "tricks_rail",
    },
}


def achievement_payload(achievement_id: str, tier: str | None) -> dict:
    """Feed payload for an earned achievement; unknown ids fall back to the raw id."""
    payload = {
        "achievement_id": achievement_id,
        "achievement_name": achievement_id,
        "tier": tier,
        "icon": achievement_id,
    }
    definition = ACHIEVEMENTS.get(achievement_id)
    if definition:
        payload.update(
            achievement_name=definition["name"],
            icon=definition["icon"],
            tiers=definition["tiers"],
            description=definition["description"],
        )
    return payload
