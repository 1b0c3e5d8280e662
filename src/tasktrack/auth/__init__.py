"""Authentication and authorization.

Learn: One authentication path — email/password → signed JWT bearer
token (7 days, no refresh, no server-side revocation). Every protected
request resolves the token to a CurrentIdentity, which the task layer
uses for ownership scoping.
"""
