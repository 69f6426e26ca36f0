"""License descriptor model."""

from pydantic import BaseModel, ConfigDict

from aaxconvert.utils.naming import sanitize_filename

DOWNLOAD_URL_TEMPLATE = "https://{host}/download?product_id={product_id}&cust_id={customer_id}&codec={codec}"


class LicenseDescriptor(BaseModel):
    """Download parameters parsed from an ``.adh`` license file."""

    customer_id: str
    product_id: str
    codec: str
    title: str

    model_config = ConfigDict(frozen=True)

    def download_url(self, host: str) -> str:
        """Build the download URL for this title on the given host."""
        return DOWNLOAD_URL_TEMPLATE.format(
            host=host,
            product_id=self.product_id,
            customer_id=self.customer_id,
            codec=self.codec,
        )

    @property
    def output_filename(self) -> str:
        """Return the destination file name, ``<title>.aax``."""
        return f"{sanitize_filename(self.title)}.aax"
