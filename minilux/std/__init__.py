# Standard builtins of the Minilux runtime, grouped by collaborator.
