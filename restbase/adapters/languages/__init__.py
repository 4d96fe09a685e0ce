"""Language toolchains — node (npm, pnpm, yarn)."""
