"""
SMS sending for the KAPCHA dashboard.

Providers (Twilio, local SMS gateway, cloud SMS gateway) share one
`send(destinations, message)` contract; see `sms.providers`.
"""
