"""Pure domain layer: clocks, order lifecycles, DTOs. Zero I/O."""
