"""Procedural world narrative

Template text that reacts to world state. No AI dependency, so it works
offline and is deterministic given a seeded random.Random.
"""

import random
from typing import Optional

from src.core.world.conditions import district_condition
from src.core.world.definitions import DISTRICTS, get_district
from src.core.world.enums import CompanionMood, DistrictCondition
from src.core.world.models import WorldState

_M = CompanionMood

COMPANION_DIALOGUE: dict[str, dict[CompanionMood, tuple[str, ...]]] = {
    "kael": {
        _M.ELATED: (
            "The Forge has never been stronger. Your discipline humbles me.",
            "Every session, you push further. This is what mastery looks like.",
            "I have nothing left to teach you. Only to witness.",
        ),
        _M.CONTENT: (
            "Good work today. Keep this rhythm.",
            "The training grounds are alive with energy.",
            "Consistency. That's the real strength.",
        ),
        _M.NEUTRAL: (
            "Ready when you are.",
            "The equipment awaits.",
            "Another day. Let's see what we can do.",
        ),
        _M.CONCERNED: (
            "It's been a while. The Forge needs you.",
            "Rust doesn't wait for motivation.",
            "I'm still here. The question is: are you?",
        ),
        _M.DISTRESSED: (
            "The grounds are falling apart. I can barely maintain what's left.",
            "This place was built on effort. It won't sustain itself.",
            "I don't know how much longer I can stay.",
        ),
    },
    "lyra": {
        _M.ELATED: (
            "The Archive hums with knowledge. Every query returns deeper answers.",
            "I've catalogued things I didn't know existed. Thank you for this.",
            "Knowledge grows exponentially here. It's beautiful.",
        ),
        _M.CONTENT: (
            "New data streams are flowing well. The collection grows.",
            "There's always more to learn. I appreciate the company.",
            "The Archive is healthy. Curiosity is well-fed.",
        ),
        _M.NEUTRAL: (
            "The terminals are ready whenever you are.",
            "Steady state. Not growing, not shrinking.",
            "What shall we research today?",
        ),
        _M.CONCERNED: (
            "The data streams are thinning. Knowledge needs tending.",
            "I'm reading the same pages twice. We need new input.",
            "Have you considered that the mind, like any garden, needs water?",
        ),
        _M.DISTRESSED: (
            "Files are corrupting. I'm losing records faster than I can save them.",
            "The Archive is going dark, section by section.",
            "Please. There's so much we haven't preserved yet.",
        ),
    },
    "sage": {
        _M.ELATED: (
            "The Sanctum radiates peace. I can feel it extending beyond these walls.",
            "You've found something most people search for their entire lives.",
            "Inner calm isn't the absence of storms. It's the eye within them.",
        ),
        _M.CONTENT: (
            "The mind is clear today. That's worth more than any treasure.",
            "Balance. Not perfection, balance.",
            "I sense you're finding your center. Good.",
        ),
        _M.NEUTRAL: (
            "The pools are still. Ready for reflection.",
            "Some days, showing up is the practice.",
            "Breathe. Begin.",
        ),
        _M.CONCERNED: (
            "The waters are growing turbid. The mind needs attention.",
            "I notice more noise than signal lately. Let's sit together.",
            "Neglecting the inner world eventually costs the outer one.",
        ),
        _M.DISTRESSED: (
            "The Sanctum trembles. Without care, peace becomes just a memory.",
            "I can barely hold the calm. The foundations are cracking.",
            "When you're ready, I'll be here. But this place may not be.",
        ),
    },
    "vex": {
        _M.ELATED: (
            "All systems optimal. Operations running at peak efficiency.",
            "Your strategic execution has been flawless. Command thrives.",
            "This is what leadership looks like. Every mission, delivered.",
        ),
        _M.CONTENT: (
            "Operations are on track. Good execution this cycle.",
            "The chain of command holds strong. Well done.",
            "Results speak louder than plans. These results are speaking.",
        ),
        _M.NEUTRAL: (
            "Awaiting directives. The Operations Deck is standing by.",
            "Status: nominal. Ready for tasking.",
            "Another cycle. What's the priority?",
        ),
        _M.CONCERNED: (
            "We're falling behind schedule. The operations backlog is growing.",
            "Command authority weakens with inaction. Just a reminder.",
            'I\'ve seen plans fail before. It always starts with "just one more day."',
        ),
        _M.DISTRESSED: (
            "Critical systems failing. I'm routing around failures but it won't last.",
            "The Command Center needs a commander. Are you still there?",
            "Without direction, everything drifts. That's physics, not judgment.",
        ),
    },
    "nyx": {
        _M.ELATED: (
            "The Vault overflows. Your financial discipline is extraordinary.",
            "Every investment you've made has compounded. This is the reward of patience.",
            "Wealth isn't just numbers. It's the freedom you've built.",
        ),
        _M.CONTENT: (
            "The ledgers are balanced. Resources are flowing.",
            "Steady growth. Not glamorous, but sustainable.",
            "You're building something lasting here. I appreciate that.",
        ),
        _M.NEUTRAL: (
            "The accounts are stable. No major changes.",
            "Resources in, resources out. The cycle continues.",
            "What would you like to invest in today?",
        ),
        _M.CONCERNED: (
            "The ledgers are showing red. We need to address this.",
            "Financial health, like physical health, requires regular checkups.",
            "Small neglect becomes large debt. You know this.",
        ),
        _M.DISTRESSED: (
            "The Vault is hemorrhaging resources. I can't stop the bleed alone.",
            "Everything we built is at risk. The seals are failing.",
            "I don't blame you. But the numbers don't lie.",
        ),
    },
    "echo": {
        _M.ELATED: (
            "The Atelier SINGS! Every surface hums with creative energy!",
            "You've made something beautiful here. I'm in awe. Truly.",
            "Creation for its own sake. That's the purest form of power.",
        ),
        _M.CONTENT: (
            "Ideas are flowing! The workshop is warm and alive.",
            "Every day you create is a day the universe didn't exist before.",
            "The colors in here... they're yours. Nobody else could make them.",
        ),
        _M.NEUTRAL: (
            "The tools are ready. What will we make today?",
            "Blank canvas, infinite possibility. No pressure.",
            "Even small creations matter. Just start.",
        ),
        _M.CONCERNED: (
            "The workshop is getting dusty. Creativity needs practice.",
            "I miss the sound of making things. Do you?",
            "The muse visits those who show up. She hasn't visited in a while.",
        ),
        _M.DISTRESSED: (
            "The colors are draining from everything. I can feel it.",
            "Without creation, what are we preserving? Just... empty rooms.",
            "I'm trying to keep the spark alive, but I need help.",
        ),
    },
}

DECAY_DESCRIPTIONS: dict[str, dict[DistrictCondition, str]] = {
    "forge": {
        DistrictCondition.WORN: "The training grounds grow quiet. Dust settles on unused equipment.",
        DistrictCondition.DECAYING: "Cracks spread across the Forge floor. The fires burn low.",
        DistrictCondition.RUINED: "The Forge lies silent. Its fires have gone cold.",
    },
    "archive": {
        DistrictCondition.WORN: "Pages gather dust. The Archive's light dims slightly.",
        DistrictCondition.DECAYING: "Data corruption spreads through the stacks. Knowledge fades.",
        DistrictCondition.RUINED: "The Archive has gone dark. Centuries of knowledge at risk.",
    },
    "sanctum": {
        DistrictCondition.WORN: "The meditation spaces feel restless. The calm is fraying.",
        DistrictCondition.DECAYING: "Weeds choke the reflection pools. Serenity slips away.",
        DistrictCondition.RUINED: "The Sanctum is desolate. Only echoes of peace remain.",
    },
    "command": {
        DistrictCondition.WORN: "Comm channels crackle with static. Operations slow.",
        DistrictCondition.DECAYING: "Warning lights flash across the Operations Deck. Systems falter.",
        DistrictCondition.RUINED: "Command Center is offline. Authority has collapsed.",
    },
    "vault": {
        DistrictCondition.WORN: "Resource flows slow to a trickle. The ledgers need attention.",
        DistrictCondition.DECAYING: "The Vault's seals weaken. Wealth bleeds into the void.",
        DistrictCondition.RUINED: "The Vault stands empty. Financial infrastructure has failed.",
    },
    "atelier": {
        DistrictCondition.WORN: "The workshop feels uninspired. Tools sit idle.",
        DistrictCondition.DECAYING: "Creative energy drains from the Atelier. Colors fade.",
        DistrictCondition.RUINED: "The Atelier is a hollow shell. Imagination has abandoned it.",
    },
}

ERA_TRANSITIONS = {
    2: "The frontier yields to your will. Your settlement enters an age of "
    "Expansion. New possibilities await in every direction.",
    3: "What was once survival is now ambition. The era of Prosperity brings "
    "abundance, and the choices grow richer.",
    4: "Your Nexus commands respect across the frontier. In this age of "
    "Dominion, your influence reshapes the world itself.",
    5: "You have transcended the boundaries of what anyone thought possible. "
    "The Nexus is more than a settlement. It is a legacy.",
}

LOCKED_HINTS = {
    "forge": "Heat radiates from beyond the fog. Something powerful awaits those "
    "who prove their discipline.",
    "archive": "Whispers of ancient knowledge drift from the darkness. The answers "
    "are there for those who seek them.",
    "sanctum": "A profound stillness emanates from this region. You sense peace "
    "waiting to be claimed.",
    "command": "Through the fog, you glimpse towering structures. A seat of power, "
    "unclaimed.",
    "vault": "The sound of flowing resources echoes faintly. Prosperity lies "
    "dormant, waiting for a worthy steward.",
    "atelier": "Flashes of impossible color break through the fog. Something "
    "creative, something alive, is in there.",
}


def _district_name(district_id: str) -> str:
    definition = get_district(district_id)
    return definition.name if definition else district_id


def companion_dialogue(
    companion_id: str,
    mood: str,
    rng: Optional[random.Random] = None,
) -> str:
    """Random line for a companion's current mood."""
    lines = COMPANION_DIALOGUE.get(companion_id, {}).get(CompanionMood(mood), ())
    if not lines:
        return "..." if mood == CompanionMood.ABSENT.value else "Silence."
    return (rng or random).choice(lines)


def decay_description(district_id: str, condition: DistrictCondition) -> str:
    text = DECAY_DESCRIPTIONS.get(district_id, {}).get(condition)
    if text is None:
        return f"{district_id} condition has deteriorated to {condition.value}."
    return text


def world_status_narrative(state: WorldState, title: str) -> str:
    """Headline for the world view. Averages unlocked districts only."""
    unlocked = state.unlocked_districts()
    avg = round(sum(d.vitality for d in unlocked) / max(len(unlocked), 1))
    name = state.nexus_name

    if avg >= 80:
        return f"{name} thrives under your stewardship. The {title} stands as a testament to sustained effort."
    if avg >= 60:
        return f"{name} is growing well. Most districts operate smoothly, though some could use attention."
    if avg >= 40:
        return f"{name} holds steady. The foundation is there, but neglect is starting to show in places."
    if avg >= 20:
        return (
            f"{name} is struggling. Several districts need urgent attention. "
            "The settlement can recover, but not without effort."
        )
    return (
        f"{name} teeters on the edge. The work you've done isn't lost, but it's "
        "fading. Action now determines what survives."
    )


_DISTRICT_NARRATIVES = {
    DistrictCondition.PRISTINE: "{name} is radiant. Every structure hums with purpose, and the air itself feels charged with potential.",
    DistrictCondition.THRIVING: "{name} operates well. There's energy here, the kind that comes from consistent attention.",
    DistrictCondition.STABLE: "{name} is stable but unremarkable. It functions, but the spark of growth has dimmed.",
    DistrictCondition.WORN: "{name} shows visible wear. Cracks form where maintenance once kept things whole.",
    DistrictCondition.DECAYING: "{name} is in serious decline. Systems fail, surfaces crack, and the atmosphere grows heavy.",
    DistrictCondition.RUINED: "{name} is barely recognizable. What was built here still exists, but it's buried under neglect.",
}


def district_narrative(district_id: str, vitality: int) -> str:
    template = _DISTRICT_NARRATIVES[district_condition(vitality)]
    return template.format(name=_district_name(district_id))


def recovery_narrative(district_id: str, old_vitality: int) -> str:
    name = _district_name(district_id)
    if old_vitality < 10:
        return (
            f"Against the odds, {name} stirs back to life. What seemed lost is "
            "being reclaimed through persistence rather than perfection."
        )
    if old_vitality < 25:
        return (
            f"{name} pulls back from the brink. The damage isn't erased, but the "
            "trajectory has changed."
        )
    return f"{name} is recovering. The effort you're putting in is visible in every restored surface."


def era_transition_narrative(new_era: int) -> str:
    return ERA_TRANSITIONS.get(new_era, "A new era dawns.")


def locked_district_hint(district_id: str) -> str:
    definition = get_district(district_id)
    if definition is None:
        return "Something stirs in the fog..."
    return LOCKED_HINTS.get(
        district_id,
        f"{definition.name} lies shrouded in fog. Reach level {definition.unlock_level} to discover it.",
    )


def locked_district_hints(state: WorldState) -> dict[str, str]:
    """Hints for every district still under fog."""
    hints = {}
    for definition in DISTRICTS:
        district = state.district(definition.district_id)
        if district is None or not district.is_unlocked:
            hints[definition.district_id] = locked_district_hint(definition.district_id)
    return hints
