from abc import ABC, abstractmethod

from ..llm.base import LLMClient


class Agent(ABC):
    def __init__(self, name: str, role: str, llm_client: LLMClient):
        self.name = name
        self.role = role
        self.llm_client = llm_client

    @abstractmethod
    def process(self, source_text: str, language_id: str):
        """
        Process the given source text and return the agent's result.
        """
        pass

    def _system_prompt(self) -> str:
        return f"You are {self.role}. Respond only with valid JSON."
