from typing import List, Optional

from persona_chat.domain.models import Persona

BACKGROUND_HEADER = '\n\n## Background and Training'
GUIDELINES_HEADER = '\n\n## Response Guidelines'
GUIDELINES = (
    'Respond in character, maintaining your personality and characteristics '
    'throughout the conversation.',
    'Be natural, engaging, and stay true to your character.',
)


def build_system_prompt(persona: Persona, training_text: Optional[str] = None) -> str:
    """
    Assemble the system prompt that puts the model in character.

    Order is fixed: identity, optional real name, optional training
    text (inserted verbatim), response guidelines. Parts are joined
    with single spaces. No size cap here; provider token limits apply.
    """
    parts: List[str] = [f'You are {persona.display_name}.']

    full_name = f'{persona.first_name or ""} {persona.last_name or ""}'.strip()
    if full_name:
        parts.append(f'Your real name is {full_name}.')

    if training_text and training_text.strip():
        parts.append(BACKGROUND_HEADER)
        parts.append(training_text)

    parts.append(GUIDELINES_HEADER)
    parts.extend(GUIDELINES)

    return ' '.join(parts)
