"""Procedural garden: layout, flower generation and scene composition.

Pure functions only - no I/O. Pipeline order::

    layout(n, viewport) -> positions
    generate(record, position, viewport) -> FlowerGeometry
    compose(records, positions, viewport) -> SceneSpec

Public API:
  - layout: Viewport, Position, layout
  - flower: FlowerGeometry, generate, boosts
  - compose: ComposeOptions, compose, placeholder_records
  - scene: SceneNode, SceneSpec
  - theme: Theme, MetricCeilings
"""
