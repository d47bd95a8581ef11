"""HTTP service exposing weighted pools."""
