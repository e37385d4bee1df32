import kopf


@kopf.on.probe(id="registeredAt")
def get_registration_timestamp(memo: kopf.Memo, **kwargs):
    return memo.get("registered_at")
