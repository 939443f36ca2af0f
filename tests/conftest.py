"""Shared fixtures for discord-chunk-archive tests."""

from __future__ import annotations

import pytest


@pytest.fixture
def raw_author() -> dict:
    """Sample message author as returned by the REST API."""
    return {
        "id": "80351110224678912",
        "username": "Nelly",
        "discriminator": "1337",
        "avatar": "8342729096ea3675442027381ff50dfe",
        "bot": False,
        "mfa_enabled": True,
    }


@pytest.fixture
def raw_message(raw_author: dict) -> dict:
    """Sample message with one durable and one ephemeral attachment."""
    return {
        "id": "1100000000000000001",
        "channel_id": "1000000000000000000",
        "author": raw_author,
        "content": "look at this",
        "pinned": False,
        "attachments": [
            {
                "id": "1100000000000000002",
                "url": "https://cdn.discordapp.com/attachments/1/2/cat.png",
                "filename": "cat.png",
                "size": 2048,
            },
            {
                "id": "1100000000000000003",
                "url": "https://cdn.discordapp.com/ephemeral-attachments/1/3/tmp.png",
                "filename": "tmp.png",
                "size": 512,
                "ephemeral": True,
            },
        ],
        "referenced_message": None,
    }
