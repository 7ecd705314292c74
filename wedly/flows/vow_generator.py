"""Personalised wedding vows."""
from typing import Literal

from pydantic import Field

from .base import CamelModel, Flow, generate_structured


class VowGeneratorInput(CamelModel):
    partner_name: str = Field(min_length=1, description="The name of the user's partner.")
    key_memories: str = Field(
        min_length=1,
        description="A few key memories or moments the user shares with their partner.",
    )
    tone: Literal["humorous", "romantic", "sentimental", "traditional"] = Field(
        description="The desired tone for the vows."
    )


class VowGeneratorOutput(CamelModel):
    vows: str = Field(description="The generated wedding vows.")


PROMPT = """You are a creative and heartfelt writer who specializes in crafting personalized wedding vows.

A user wants to write vows for their partner, {partner_name}.

Here are some key memories they've shared:
{key_memories}

The user wants the vows to have a {tone} tone.

Based on this information, please draft a beautiful and personal set of wedding vows. The vows should be touching, personal, and reflect the tone requested.

Return the generated vows in the 'vows' field.
"""


def _generate_vows(flow_input: VowGeneratorInput) -> VowGeneratorOutput:
    prompt = PROMPT.format(
        partner_name=flow_input.partner_name,
        key_memories=flow_input.key_memories,
        tone=flow_input.tone,
    )
    return generate_structured(prompt, VowGeneratorOutput)


generate_vows = Flow("vowGeneratorFlow", VowGeneratorInput, VowGeneratorOutput, _generate_vows)
