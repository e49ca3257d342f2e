"""Block creation core: trigger, collector, serializer, linker and controller."""
