"""Content sniffers bundled with pubfetch."""

from .markup import HTMLSniffer, OPDS1Sniffer
from .manifests import (
    JSONSniffer, LCPLicenseSniffer, OPDS2Sniffer, ReadiumManifestSniffer, W3CManifestSniffer,
)
from .bitmap import BMPSniffer, GIFSniffer, JPEGSniffer, PNGSniffer, TIFFSniffer, WebPSniffer
from .containers import ArchiveSniffer, EPUBSniffer, LPFSniffer, ReadiumPackageSniffer, ZipSniffer
from .pdf import PDFSniffer
