# rep_client/exercise_data.py
# Static push-up variation metadata for the presentation layer.

from typing import Dict, List

from pydantic import BaseModel, ConfigDict, conint


class ExerciseProfile(BaseModel):
    model_config = ConfigDict(frozen=True)

    variation: str
    title: str
    image: str
    description: str
    tips: List[str]
    body_focus: Dict[str, conint(ge=0, le=100)]


_RAW_PROFILES = {
    'standard': {
        'title': 'Standard Push Up',
        'image': 'standard-pushup.svg',
        'description': 'The standard push-up is a classic exercise that targets the chest, shoulders, triceps, and core.',
        'tips': [
            'Keep your body in a straight line',
            'Position hands slightly wider than shoulder-width',
            'Lower until chest nearly touches the floor',
            'Push back up to starting position',
        ],
        'body_focus': {'arms': 60, 'chest': 95, 'core': 40},
    },
    'wide': {
        'title': 'Wide Push Up',
        'image': 'wide-pushup.svg',
        'description': 'Wide push-ups place more emphasis on the chest muscles by positioning the hands wider than shoulder-width apart.',
        'tips': [
            'Place hands wider than shoulder-width',
            'Keep elbows at a 45-degree angle',
            'Lower until chest nearly touches the floor',
            'Focus on squeezing chest muscles',
        ],
        'body_focus': {'arms': 60, 'chest': 95, 'core': 40},
    },
    'diamond': {
        'title': 'Diamond Push Up',
        'image': 'diamond-pushup.svg',
        'description': 'Diamond push-ups target the triceps more intensely by positioning the hands close together in a diamond shape.',
        'tips': [
            'Form a diamond shape with your thumbs and index fingers',
            'Position hands directly under your chest',
            'Keep elbows close to your body',
            'Lower until chest touches your hands',
        ],
        'body_focus': {'arms': 90, 'chest': 60, 'core': 50},
    },
    'incline': {
        'title': 'Incline Push Up',
        'image': 'incline-pushup.svg',
        'description': 'Incline push-ups are easier than standard push-ups and are great for beginners. They place less stress on the shoulders and arms.',
        'tips': [
            'Place hands on an elevated surface',
            'Keep body straight from head to heels',
            'Lower chest toward the elevated surface',
            'Push back up to starting position',
        ],
        'body_focus': {'arms': 50, 'chest': 75, 'core': 35},
    },
    'decline': {
        'title': 'Decline Push Up',
        'image': 'decline-pushup.svg',
        'description': 'Decline push-ups are more challenging than standard push-ups and place more emphasis on the upper chest and shoulders.',
        'tips': [
            'Place feet on an elevated surface',
            'Position hands on the floor at shoulder width',
            'Lower until chest nearly touches the floor',
            'Engage core throughout the movement',
        ],
        'body_focus': {'arms': 75, 'chest': 90, 'core': 65},
    },
}

EXERCISE_PROFILES: Dict[str, ExerciseProfile] = {
    key: ExerciseProfile(variation=key, **data) for key, data in _RAW_PROFILES.items()
}

DEFAULT_VARIATION = 'standard'


def get_exercise_profile(variation: str) -> ExerciseProfile:
    """Raises KeyError for an unknown variation."""
    return EXERCISE_PROFILES[variation]


def list_variations() -> List[str]:
    return list(EXERCISE_PROFILES)
