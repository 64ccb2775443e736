"""Hologram records, storage and live-object management.

types.py         Location, HologramRecord and the WorldAdapter protocol.
persistence.py   HologramPersistence protocol and the YAML implementation.
arena.py         LiveObjectArena: the store's list of spawned objects.
matching.py      Removal matching by stripped visible text.
store.py         HologramStore: create / delete / reload / shutdown.
memory_world.py  InMemoryWorldAdapter for local runs and tests.
"""
