"""Vision board image generation; returns the image as a data URI."""
import base64

from pydantic import Field

from ..constants import IMAGE_MODEL
from .base import CamelModel, Flow, FlowError, generate_content


class ImageGeneratorInput(CamelModel):
    prompt: str = Field(min_length=1, description="The text prompt for image generation.")


class ImageGeneratorOutput(CamelModel):
    image: str = Field(
        description="The generated image as a data URI: 'data:<mimetype>;base64,<encoded_data>'."
    )


def _generate(flow_input: ImageGeneratorInput) -> ImageGeneratorOutput:
    from google.genai import types

    response = generate_content(
        IMAGE_MODEL,
        flow_input.prompt,
        types.GenerateContentConfig(response_modalities=["TEXT", "IMAGE"]),
    )

    for candidate in response.candidates or []:
        parts = candidate.content.parts if candidate.content else None
        for part in parts or []:
            inline = part.inline_data
            if inline is not None and inline.data:
                encoded = base64.b64encode(inline.data).decode("ascii")
                mime_type = inline.mime_type or "image/png"
                return ImageGeneratorOutput(image=f"data:{mime_type};base64,{encoded}")

    raise FlowError("Image generation failed.")


generate_image = Flow(
    "imageGeneratorFlow",
    ImageGeneratorInput,
    ImageGeneratorOutput,
    _generate,
    premium=True,
)
