"""Shared fixtures: a metadata service, an in-memory host and serializers."""

import pytest

from treescript.api import MetadataService
from treescript.catalog import BUILTIN_DUMP
from treescript.options import Options
from treescript.serialize import Serializer
from treescript.tree import InMemoryHost


@pytest.fixture
def metadata():
    return MetadataService(BUILTIN_DUMP)


@pytest.fixture
def host(metadata):
    return InMemoryHost(metadata)


@pytest.fixture
def make_serializer(host):
    """Build a Serializer for the host with the given option overrides."""
    def make(**options):
        return Serializer(host, options=Options(**options), prewarm=False)
    return make


@pytest.fixture
def serializer(make_serializer):
    return make_serializer()


@pytest.fixture
def new(host):
    """Create an instance, set its name and properties, and parent it."""
    def new(class_name, parent=None, name=None, **properties):
        instance = host.create_instance(class_name)
        if name is not None:
            instance.Name = name
        for prop, value in properties.items():
            instance[prop] = value
        instance.Parent = parent
        return instance
    return new
