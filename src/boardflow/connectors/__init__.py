"""Front ends that drive BoardService."""
