# Python modules
import logging
from typing import Optional
import requests

# Payload modules
from const import *
from storage.account import StorageAccountRef
from storage.analytics import AnalyticsConfig, parseServiceProperties
from storage.errors import ParseError, ProtocolError, TransportError
from storage.signer import RequestSigner, SignedRequest

###############################################################################

# Minimal client for the storage REST endpoints the verifier needs
class StorageRestClient:
   def __init__(self,
                tracer: logging.Logger,
                signer: RequestSigner,
                timeout: int = HTTP_TIMEOUT_SECS,
                session: Optional[requests.Session] = None):
      self.tracer = tracer
      self.signer = signer
      self.timeout = timeout
      self.session = session or requests.Session()

   # Send a signed request; anything but 2xx raises ProtocolError with the body attached
   def sendRequest(self,
                   request: SignedRequest,
                   data: Optional[bytes] = None) -> requests.Response:
      headers = dict(request.headers)
      if data is not None:
         headers["Content-Length"] = str(len(data))
      try:
         response = self.session.request(request.method,
                                         request.uri,
                                         headers = headers,
                                         data = data,
                                         timeout = self.timeout,
                                         allow_redirects = request.allowRedirects)
      except requests.exceptions.RequestException as e:
         self.tracer.error("could not send %s request to %s (%s)" % (request.method, request.uri, e))
         raise TransportError("%s %s failed (%s)" % (request.method, request.uri, e)) from e
      if not 200 <= response.status_code < 300:
         self.tracer.debug(response.text) # full body for diagnostics
         raise ProtocolError("%s %s returned %s" % (request.method, request.uri, response.reason),
                             statusCode = response.status_code,
                             body = response.text)
      return response

   # Read the blob service properties (logging and metrics settings)
   def getServiceProperties(self,
                            account: StorageAccountRef) -> AnalyticsConfig:
      self.tracer.info("getting service properties of storage account %s" % account.name)
      request = self.signer.signServiceProperties(account, "GET")
      response = self.sendRequest(request)
      try:
         body = response.content.decode("utf-8-sig")
      except UnicodeDecodeError as e:
         raise ParseError("service properties are not valid UTF-8 (%s)" % e,
                          body = response.text) from e
      return parseServiceProperties(body)

   # Write the blob service properties
   def setServiceProperties(self,
                            account: StorageAccountRef,
                            xmlBody: str) -> bool:
      self.tracer.info("setting service properties of storage account %s" % account.name)
      data = xmlBody.encode("utf-8")
      request = self.signer.signServiceProperties(account,
                                                  "PUT",
                                                  contentLength = len(data))
      self.sendRequest(request, data = data)
      return True

   # Get the size in bytes of a blob (e.g. a VHD) from its Content-Length
   def headBlob(self,
                account: StorageAccountRef,
                blobUri: str) -> int:
      self.tracer.info("getting blob properties of %s" % blobUri)
      request = self.signer.signBlob(account, "HEAD", blobUri)
      response = self.sendRequest(request)
      contentLength = response.headers.get("Content-Length")
      try:
         return int(contentLength)
      except (TypeError, ValueError) as e:
         raise ParseError("invalid Content-Length %s for blob %s" % (contentLength, blobUri),
                          body = response.text) from e
