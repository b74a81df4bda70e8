"""Pinned versions of the external tools invoked by the catalog tasks."""

GOLANGCI_LINT = "v1.64.8"
GO_PRETTIER = "v3.5.3"
GO_YAMLLINT = "v1.35.1"
