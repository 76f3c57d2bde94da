from enum import Enum


class OpenAIModels(str, Enum):
    GPT_35_TURBO = 'gpt-3.5-turbo'
    GPT_4O_MINI = 'gpt-4o-mini'
    GPT_4O = 'gpt-4o'


COMPLETIONS_API_PREFIX = '/v1'
