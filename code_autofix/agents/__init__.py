from .base import Agent
from .fixer import FixerAgent, FixSuggestions
