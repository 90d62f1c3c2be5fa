"""Client artifact compiler.

Turns the ``groups`` of a :class:`~clientsmith.models.ClientSpec` into the
source files of a typed Python client.

Typical usage::

    from clientsmith.config import write_artifacts
    from clientsmith.sdk import generate_client_sdk

    artifacts = generate_client_sdk(definition)
    write_artifacts(artifacts, "./petstore_client")

Sub-modules:

* :mod:`~clientsmith.sdk.compiler` -- :func:`generate_client_sdk` and the
  per-operation input classification.
* :mod:`~clientsmith.sdk.emitters` -- Builders for the registry, dispatch
  table and schema modules.
* :mod:`~clientsmith.sdk.naming` -- Identifier and literal helpers.
* :mod:`~clientsmith.sdk.boilerplate` -- Jinja2 rendering and the runtime
  modules shipped with every client.
"""

from clientsmith.sdk.compiler import classify_inputs, generate_client_sdk

__all__ = ["classify_inputs", "generate_client_sdk"]
