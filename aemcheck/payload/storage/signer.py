# Python modules
import base64
from collections import OrderedDict
from datetime import datetime, timezone
import hashlib
import hmac
import logging
from typing import Dict, NamedTuple, Optional
from urllib.parse import quote, urlencode, urlsplit

# Payload modules
from const import *
from storage.account import StorageAccountRef

###############################################################################

# A request ready to be sent; built fresh for every call
class SignedRequest(NamedTuple):
   method: str
   uri: str
   headers: Dict[str, str]
   authorizationHeader: str
   allowRedirects: bool = False

###############################################################################

# Sign storage REST requests with the Shared Key scheme
# https://docs.microsoft.com/en-us/rest/api/storageservices/authorize-with-shared-key
class RequestSigner:
   serviceQuery = OrderedDict([("restype", "service"),
                               ("comp", "properties")])

   def __init__(self,
                tracer: logging.Logger,
                xmsVersion: str = STORAGE_API_VERSION):
      self.tracer = tracer
      self.xmsVersion = xmsVersion

   @staticmethod
   def formatDate(when: Optional[datetime] = None) -> str:
      if when is None:
         when = datetime.now(timezone.utc)
      return when.strftime(TIME_FORMAT_RFC1123)

   # Only Content-Length is ever set; the other standard header slots stay empty
   @staticmethod
   def buildCanonicalizedHeaders(method: str,
                                 contentLength: Optional[int],
                                 date: str,
                                 xmsVersion: str) -> str:
      fields = [method.upper(),
                "",                                                # Content-Encoding
                "",                                                # Content-Language
                "" if contentLength is None else str(contentLength),
                "",                                                # Content-MD5
                "",                                                # Content-Type
                "",                                                # Date
                "",                                                # If-Modified-Since
                "",                                                # If-Match
                "",                                                # If-None-Match
                "",                                                # If-Unmodified-Since
                ""]                                                # Range
      return "\n".join(fields) + "\nx-ms-date:%s\nx-ms-version:%s\n" % (date, xmsVersion)

   @staticmethod
   def buildCanonicalizedResource(accountName: str,
                                  resourcePath: str,
                                  query: Optional[Dict[str, str]] = None) -> str:
      resource = "/%s/%s" % (accountName, resourcePath.lstrip("/"))
      for k in sorted((query or {}).keys(), key = str.lower):
         resource += "\n%s:%s" % (k.lower(), query[k])
      return resource

   @staticmethod
   def computeSignature(accountKey: str,
                        stringToSign: str) -> str:
      decodedKey = base64.b64decode(accountKey)
      digest = hmac.new(decodedKey,
                        stringToSign.encode("utf-8"),
                        digestmod = hashlib.sha256).digest()
      return base64.b64encode(digest).decode("utf-8")

   # Sign a request against https://<account>.<resourceType>.<suffix>/<resourcePath>
   def sign(self,
            account: StorageAccountRef,
            method: str,
            resourcePath: str = "",
            contentLength: Optional[int] = None,
            xmsVersion: Optional[str] = None,
            query: Optional[Dict[str, str]] = None,
            resourceType: str = RESOURCE_TYPE_BLOB,
            uri: Optional[str] = None,
            date: Optional[datetime] = None) -> SignedRequest:
      xmsVersion = xmsVersion or self.xmsVersion
      timestamp = self.formatDate(date)
      stringToSign = self.buildCanonicalizedHeaders(method,
                                                    contentLength,
                                                    timestamp,
                                                    xmsVersion) + \
                     self.buildCanonicalizedResource(account.name,
                                                     resourcePath,
                                                     query)
      authorization = "SharedKey %s:%s" % (account.name,
                                           self.computeSignature(account.primaryKey, stringToSign))
      if not uri:
         uri = "https://%s.%s.%s/%s" % (account.name,
                                        resourceType,
                                        account.endpointSuffix,
                                        quote(resourcePath.lstrip("/")))
         if query:
            uri += "?" + urlencode(query)
      headers = OrderedDict([("x-ms-version", xmsVersion),
                             ("x-ms-date", timestamp),
                             ("Authorization", authorization)])
      self.tracer.debug("signed %s request for %s" % (method.upper(), uri))
      return SignedRequest(method = method.upper(),
                           uri = uri,
                           headers = headers,
                           authorizationHeader = authorization)

   # GET/PUT <account>/?restype=service&comp=properties
   def signServiceProperties(self,
                             account: StorageAccountRef,
                             method: str,
                             contentLength: Optional[int] = None,
                             date: Optional[datetime] = None) -> SignedRequest:
      return self.sign(account,
                       method,
                       resourcePath = "",
                       contentLength = contentLength,
                       query = self.serviceQuery,
                       date = date)

   # HEAD an existing blob URI; the canonicalized resource is /<account>/<container>/<blob>
   def signBlob(self,
                account: StorageAccountRef,
                method: str,
                blobUri: str,
                date: Optional[datetime] = None) -> SignedRequest:
      path = urlsplit(blobUri).path
      return self.sign(account,
                       method,
                       resourcePath = path,
                       uri = blobUri,
                       date = date)
