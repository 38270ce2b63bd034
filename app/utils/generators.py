import secrets
import string
import time

def generate_share_slug(random_length=9):
    """Generates a URL-safe share slug: base36 timestamp plus a random suffix."""
    alphabet = string.digits + string.ascii_lowercase
    millis = int(time.time() * 1000)
    stamp = ""
    while millis:
        millis, remainder = divmod(millis, 36)
        stamp = alphabet[remainder] + stamp
    suffix = ''.join(secrets.choice(alphabet) for _ in range(random_length))
    return f"{stamp}-{suffix}"
