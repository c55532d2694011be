"""
The `database` package holds everything below the HTTP layer: settings
(`config`), ORM entities (`entities`), data-access objects (`daos`) and the
service functions with their collaborators (`core`).
"""
