"""
Transformer for password-protecting pages with client-side decryption.
"""
from __future__ import annotations

import base64
import enum
import logging
import os
from importlib import resources

from .core import Asset, Transformer, TransformError
from .dependencies import PipDependency
from .minify import Minifier
from .simple import ReplaceTransformer


logger = logging.getLogger(__name__)

DEFAULT_ITERATIONS = 600_000
SALT_SIZE = 32
KEY_SIZE = 32
NONCE_SIZE = 12


class StorageMode(str, enum.Enum):
    """
    Where the browser caches a derived key between page loads.
    """
    NONE = 'noOpStorage'
    LOCAL = 'window.localStorage'
    SESSION = 'window.sessionStorage'


class EncryptionError(TransformError):
    """
    Raised when an Asset cannot be encrypted, including when the transformer
    is missing its password or template.
    """


def random_salt() -> bytes:
    """
    Return a random salt suitable for PBKDF2. Use this to supply a fixed salt
    for an EncryptionTransformer.
    """
    return os.urandom(SALT_SIZE)


def derive_key(password: str, salt: bytes, iterations: int) -> bytes:
    from cryptography.hazmat.primitives import hashes
    from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
    kdf = PBKDF2HMAC(algorithm=hashes.SHA256(), length=KEY_SIZE, salt=salt, iterations=iterations)
    return kdf.derive(password.encode())


def encrypt(data: bytes, password: str, iterations: int, salt: bytes | None = None) -> tuple[bytes, bytes]:
    """
    Encrypt @data with AES-GCM under a key derived from @password. A random
    salt is generated when @salt is empty. Returns the nonce-prefixed
    ciphertext and the salt used.
    """
    from cryptography.hazmat.primitives.ciphers.aead import AESGCM
    salt = bytes(salt) if salt else random_salt()
    key = derive_key(password, salt, iterations)
    nonce = os.urandom(NONCE_SIZE)
    return nonce + AESGCM(key).encrypt(nonce, data, None), salt


def load_decrypt_script() -> str:
    return resources.files(__package__).joinpath('resources', 'decrypt.js').read_text('utf-8')


class EncryptionTransformer(Transformer):
    """
    Replaces each Asset with a password form which decrypts the original
    content in the browser. The password itself never appears in the output.

    The template must contain a password input, a form, and a placeholder
    element for messages, identified by the configured element ids. The
    decryption script is inserted before its closing `</body>` tag (or
    `</html>`, or at the end).
    """
    @classmethod
    def get_dependencies(cls):
        return {
            PipDependency('cryptography'),
            PipDependency('lxml'),
        }

    def __init__(self,
                 template: Asset | None,
                 password: str,
                 *,
                 iterations: int = DEFAULT_ITERATIONS,
                 salt: bytes | None = None,
                 password_input_id: str = 'password',
                 form_id: str = 'password-form',
                 content_id: str = 'encrypted-content',
                 storage_mode: StorageMode = StorageMode.NONE,
                 minify_script: bool = False,
                 minifier: Minifier | None = None):
        """
        :param template: The HTML page shown in place of encrypted content.
        :param password: The password to encrypt with.
        :param iterations: PBKDF2 iterations. Higher is slower to attack but
            also slower to decrypt in the browser.
        :param salt: A salt shared by every Asset this transformer encrypts.
            Less secure than the default random salt per Asset, but gives
            stable output between builds and lets browsers reuse a cached
            key across pages.
        :param password_input_id: Element id of the password input.
        :param form_id: Element id of the password form.
        :param content_id: Element id of the message placeholder.
        :param storage_mode: Where the browser caches the derived key.
        :param minify_script: Whether to minify the injected script.
        :param minifier: The minifier to use with @minify_script.
        """
        self.template = template
        self.password = password
        self.iterations = iterations
        self.salt = salt
        self.password_input_id = password_input_id
        self.form_id = form_id
        self.content_id = content_id
        self.storage_mode = StorageMode(storage_mode)
        self.minify_script = minify_script
        self._minifier = minifier

    def __repr__(self):
        return f'{self.__class__.__name__}(iterations={self.iterations}, storage_mode={self.storage_mode.name})'

    @property
    def minifier(self):
        if not self._minifier:
            self._minifier = Minifier()
        return self._minifier

    def validate_template(self, path: str, template_html: str):
        """
        Check that the template has the elements the decryption script needs.
        """
        import lxml.etree
        import lxml.html
        try:
            document = lxml.html.document_fromstring(template_html)
        except (lxml.etree.LxmlError, ValueError) as e:
            raise EncryptionError(path, f'encryption template could not be parsed: {e}') from e

        required = [
            (self.password_input_id, 'input'),
            (self.form_id, 'form'),
            (self.content_id, None),
        ]
        for element_id, tag in required:
            element = document.get_element_by_id(element_id, None)
            if element is None:
                raise EncryptionError(path, f'encryption template must contain element with id {element_id!r}')
            if tag and element.tag != tag:
                raise EncryptionError(
                    path, f'element {element_id!r} in encryption template must be a <{tag}>, not <{element.tag}>'
                )

    def build_script(self, encrypted: str, salt: str):
        """
        Fill in the decryption script for one Asset.
        """
        script = Asset('/decrypt.js', load_decrypt_script())
        ReplaceTransformer([
            ('%ENCRYPTED_DATA%', encrypted),
            ('%SALT%', salt),
            ('%ITERATIONS%', str(self.iterations)),
            ('%PASSWORD_INPUT_ID%', self.password_input_id),
            ('%FORM_ID%', self.form_id),
            ('%CONTENT_ID%', self.content_id),
            ('%STORAGE_MODE%', self.storage_mode.value),
        ])(script)
        if self.minify_script:
            script.text = self.minifier.minify('text/javascript', script.text)
        return script.text

    def __call__(self, asset: Asset):
        if not self.template:
            raise EncryptionError(asset.path, 'encryption template is required')
        if not self.password:
            raise EncryptionError(asset.path, 'password is required for encryption')

        template_html = self.template.text
        self.validate_template(asset.path, template_html)

        ciphertext, salt = encrypt(asset.data, self.password, self.iterations, self.salt)
        try:
            script = self.build_script(
                base64.b64encode(ciphertext).decode('ascii'),
                base64.b64encode(salt).decode('ascii'),
            )
        except ValueError as e:
            raise EncryptionError(asset.path, f'failed to generate decryption script: {e}') from e
        script_tag = f'\n<script>\n{script}\n</script>\n'

        for closing_tag in ('</body>', '</html>'):
            idx = template_html.rfind(closing_tag)
            if idx != -1:
                asset.text = template_html[:idx] + script_tag + template_html[idx:]
                break
        else:
            asset.text = template_html + script_tag

        logger.debug('Encrypted %s', asset.path)
