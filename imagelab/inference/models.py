"""Hosted model identifiers and their default inputs."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class ModelPreset:
    """A model reference plus the inputs every request sends to it."""

    ref: str
    defaults: dict[str, Any] = field(default_factory=dict)

    def build_input(self, **overrides: Any) -> dict[str, Any]:
        """Merge request-specific values over the preset defaults."""

        payload = dict(self.defaults)
        payload.update(overrides)
        return payload


GFPGAN = ModelPreset(
    ref="tencentarc/gfpgan:0fbacf7afc6c144e5be9767cff80f25aff23e52b0708f17e20f9879b2f21516c",
    defaults={"scale": 2, "version": "v1.4"},
)

FACE_TO_STICKER = ModelPreset(
    ref="fofr/face-to-sticker:764d4827ea159608a07cdde8ddf1c6000019627515eb02b6b449695fd547e5ef",
    defaults={
        "steps": 15,
        "width": 800,
        "height": 800,
        "prompt": "sticker",
        "upscale": False,
        "upscale_steps": 5,
        "negative_prompt": "",
        "prompt_strength": 4.0,
        "ip_adapter_noise": 0.4,
        "ip_adapter_weight": 0.1,
        "instant_id_strength": 0.6,
    },
)

SDXL_LIGHTNING = ModelPreset(
    ref="bytedance/sdxl-lightning-4step:5599ed30703defd1d160a25a63321b4dec97101d98b4674bcc56e41f62f35637",
    defaults={
        "width": 1024,
        "height": 1024,
        "scheduler": "K_EULER",
        "num_outputs": 1,
        "guidance_scale": 0,
        "negative_prompt": "worst quality, low quality",
        "num_inference_steps": 4,
    },
)

INSTRUCT_PIX2PIX = ModelPreset(
    ref="timothybrooks/instruct-pix2pix:30c1d0b916a6f8efce20493f5d61ee27491ab2a60437c13c588468b9810ec23f",
    defaults={
        "scheduler": "K_EULER_ANCESTRAL",
        "num_outputs": 1,
        "guidance_scale": 7.5,
        "num_inference_steps": 100,
        "image_guidance_scale": 1.5,
    },
)

CODEFORMER = ModelPreset(
    ref="sczhou/codeformer:7de2ea26c616d5bf2245ad0d5e24f0ff9a6204578a5c876db53142edd9d2cd56",
    defaults={
        "upscale": 2,
        "face_upsample": True,
        "background_enhance": True,
        "codeformer_fidelity": 0.1,
    },
)

LLAMA_CHAT = ModelPreset(
    ref="meta/meta-llama-3-8b-instruct",
    defaults={
        "top_k": 0,
        "top_p": 0.95,
        "max_tokens": 512,
        "temperature": 0.7,
        "system_prompt": (
            "Eres un asistente útil. Mantén el contexto del historial de la conversación "
            "proporcionado. Responde en el mismo idioma que el usuario."
        ),
        "length_penalty": 1,
        "max_new_tokens": 512,
        "stop_sequences": "<|end_of_text|>,<|eot_id|>",
        "prompt_template": (
            "<|begin_of_text|><|start_header_id|>system<|end_header_id|>\n\n{system_prompt}<|eot_id|>"
            "<|start_header_id|>user<|end_header_id|>\n\n{prompt}<|eot_id|>"
            "<|start_header_id|>assistant<|end_header_id|>\n\n"
        ),
        "presence_penalty": 0,
        "log_performance_metrics": False,
    },
)
