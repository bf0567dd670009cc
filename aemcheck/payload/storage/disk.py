# Python modules
import logging
from typing import NamedTuple

# Payload modules
from const import *
from storage.errors import TierError

###############################################################################

BYTES_PER_GB = 1024 * 1024 * 1024

# Guaranteed performance of a premium disk
class DiskTier(NamedTuple):
   name: str
   iops: int
   throughputMBs: int

def getDiskTier(sizeGB: float) -> DiskTier:
   for (upperBound, name, iops, throughput) in DISK_TIERS:
      if sizeGB < upperBound:
         return DiskTier(name, iops, throughput)
   raise TierError("unknown disk size tier (%s GB)" % sizeGB)

def getDiskTierForBytes(sizeBytes: int) -> DiskTier:
   return getDiskTier(sizeBytes / BYTES_PER_GB)

# Size a disk from its VHD blob when the VM description carries no size
def getBlobDiskTier(tracer: logging.Logger,
                    client,
                    account,
                    blobUri: str) -> DiskTier:
   if not account.isPremium():
      tracer.warning("storage account %s is %s; premium disk tiers do not apply to its disks" % (account.name,
                                                                                             account.accountTypeTag or "not premium"))
   sizeBytes = client.headBlob(account, blobUri)
   tier = getDiskTierForBytes(sizeBytes)
   tracer.info("disk %s (%d bytes) is %s (iops=%d, throughput=%dMB/s)" % (blobUri,
                                                                         sizeBytes,
                                                                         tier.name,
                                                                         tier.iops,
                                                                         tier.throughputMBs))
   return tier
