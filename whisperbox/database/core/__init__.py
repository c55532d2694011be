"""
The `core` package holds the service layer: the account and inbox workflow
(`funcs`), its error taxonomy (`errors`), credential helpers (`security`),
verification email delivery (`mailer`) and storage handle construction
(`session`).
"""
