"""Shared fixtures for linkauto tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from linkauto.config import Config
from linkauto.definitions import build_definitions
from linkauto.models import Definition, Document, Paragraph

GAN_URL = "https://en.wikipedia.org/wiki/Generative_adversarial_network"
BIGGAN_URL = "https://arxiv.org/abs/1809.11096#deepmind"
CNN_URL = "https://en.wikipedia.org/wiki/Convolutional_neural_network"


@pytest.fixture
def sample_pairs() -> list[tuple[str, str]]:
    return [
        ("GAN", GAN_URL),
        ("BigGAN", BIGGAN_URL),
        ("(CNN|[Cc]onvolutional [Nn]eural [Nn]etwork)", CNN_URL),
    ]


@pytest.fixture
def sample_definitions(sample_pairs) -> list[Definition]:
    return build_definitions(sample_pairs)


@pytest.fixture
def make_doc():
    def _make(*inlines, **kwargs) -> Document:
        return Document((Paragraph(tuple(inlines)),), **kwargs)
    return _make


@pytest.fixture
def definitions_file(tmp_path) -> Path:
    path = tmp_path / "definitions.yaml"
    path.write_text(
        f'- ["GAN", "{GAN_URL}"]\n'
        f'- ["BigGAN", "{BIGGAN_URL}"]\n'
        f'- pattern: "(CNN|[Cc]onvolutional [Nn]eural [Nn]etwork)"\n'
        f'  target: "{CNN_URL}"\n'
    )
    return path


@pytest.fixture
def sample_config(tmp_path, definitions_file) -> Config:
    return Config(
        definitions_path=definitions_file,
        output_dir=tmp_path / "out",
        max_workers=1,
    )
