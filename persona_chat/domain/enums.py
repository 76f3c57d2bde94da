from enum import Enum


class Role(str, Enum):
    USER = 'user'
    ASSISTANT = 'assistant'


class PersonaSort(str, Enum):
    RECENT = 'recent'
    ALPHABETICAL = 'alphabetical'
    POPULARITY = 'popularity'
