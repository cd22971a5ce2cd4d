# tests/sample_output.py
"""
Captured diagnostic tool output used across the test suite.
"""

DMIDECODE_MEMORY = """# dmidecode 3.3
Getting SMBIOS data from sysfs.
SMBIOS 3.2.0 present.

Handle 0x1000, DMI type 16, 23 bytes
Physical Memory Array
	Location: System Board Or Motherboard
	Use: System Memory
	Error Correction Type: Multi-bit ECC
	Maximum Capacity: 2 TB
	Error Information Handle: Not Provided
	Number Of Devices: 4

Handle 0x1100, DMI type 17, 84 bytes
Memory Device
	Array Handle: 0x1000
	Total Width: 72 bits
	Data Width: 64 bits
	Size: 16 GB
	Form Factor: DIMM
	Set: None
	Locator: A1
	Bank Locator: P0_Node0_Channel0_Dimm0
	Type: DDR4
	Type Detail: Synchronous Registered (Buffered)
	Speed: 3200 MT/s
	Manufacturer: Samsung
	Serial Number: 0123ABCD
	Asset Tag: Not Specified
	Part Number: M393A2K43DB3-CWE
	Rank: 2
	Configured Memory Speed: 2933 MT/s

Handle 0x1101, DMI type 17, 84 bytes
Memory Device
	Array Handle: 0x1000
	Size: 16 GB
	Form Factor: DIMM
	Locator: A2
	Bank Locator: P0_Node0_Channel1_Dimm0
	Type: DDR4
	Speed: 3200 MT/s
	Manufacturer: Samsung
	Serial Number: 0123ABCE
	Part Number: M393A2K43DB3-CWE
	Rank: 2
	Configured Memory Speed: 2933 MT/s

Handle 0x1102, DMI type 17, 84 bytes
Memory Device
	Array Handle: 0x1000
	Size: No Module Installed
	Form Factor: Unknown
	Locator: A3
	Bank Locator: P0_Node0_Channel2_Dimm0
	Type: Unknown
	Speed: Unknown
	Manufacturer: Not Specified
	Serial Number: Not Specified
	Part Number: Not Specified
	Rank: Unknown

Handle 0x1103, DMI type 17, 84 bytes
Memory Device
	Array Handle: 0x1000
	Size: 8 GB
	Form Factor: DIMM
	Locator: A4
	Bank Locator: P0_Node0_Channel3_Dimm0
	Type: DDR4
	Speed: 3200 MT/s
	Manufacturer: Micron
	Serial Number: 9876FEDC
	Part Number: 18ASF1G72PDZ-3G2E1
	Rank: 1
	Configured Memory Speed: 2933 MT/s
"""

LSCPU = """Architecture:                    x86_64
CPU op-mode(s):                  32-bit, 64-bit
Byte Order:                      Little Endian
CPU(s):                          64
On-line CPU(s) list:             0-63
Thread(s) per core:              2
Core(s) per socket:              16
Socket(s):                       2
NUMA node(s):                    2
Vendor ID:                       GenuineIntel
CPU family:                      6
Model:                           85
Model name:                      Intel(R) Xeon(R) Gold 6226R CPU @ 2.90GHz
Stepping:                        7
CPU MHz:                         1200.000
CPU max MHz:                     3900.0000
CPU min MHz:                     1200.0000
"""

PROC_CPUINFO = """processor	: 0
vendor_id	: GenuineIntel
model name	: Intel(R) Xeon(R) E-2236 CPU @ 3.40GHz
physical id	: 0
cpu cores	: 6

processor	: 1
vendor_id	: GenuineIntel
model name	: Intel(R) Xeon(R) E-2236 CPU @ 3.40GHz
physical id	: 0
cpu cores	: 6
"""

SMARTCTL_SATA = """smartctl 7.2 2020-12-30 r5155 [x86_64-linux-5.15.0-91-generic] (local build)
Copyright (C) 2002-20, Bruce Allen, Christian Franke, www.smartmontools.org

=== START OF INFORMATION SECTION ===
Model Family:     Seagate Exos 7E8
Device Model:     ST4000NM0035-1V4107
Serial Number:    ZC1ABCDE
LU WWN Device Id: 5 000c50 0a1b2c3d4
Firmware Version: TN03
User Capacity:    4,000,787,030,016 bytes [4.00 TB]
Sector Sizes:     512 bytes logical, 4096 bytes physical
Rotation Rate:    7200 rpm
Form Factor:      3.5 inches
SMART support is: Available - device has SMART capability.
"""

SMARTCTL_NVME = """smartctl 7.2 2020-12-30 r5155 [x86_64-linux-5.15.0-91-generic] (local build)
Copyright (C) 2002-20, Bruce Allen, Christian Franke, www.smartmontools.org

=== START OF INFORMATION SECTION ===
Model Number:                       Samsung SSD 980 PRO 1TB
Serial Number:                      S5GXNX0R123456
Firmware Version:                   5B2QGXA7
PCI Vendor/Subsystem ID:            0x144d
Total NVM Capacity:                 1,000,204,886,016 [1.00 TB]
Unallocated NVM Capacity:           0
Namespace 1 Size/Capacity:          1,000,204,886,016 [1.00 TB]
"""

UDEV_SSD = """DEVNAME=/dev/sdb
DEVTYPE=disk
ID_BUS=ata
ID_MODEL=Samsung_SSD_860_EVO_500GB
ID_SERIAL=Samsung_SSD_860_EVO_500GB_S3Z1NB0K123456
ID_SERIAL_SHORT=S3Z1NB0K123456
ID_REVISION=RVT04B6Q
"""

MDADM_EXAMINE = """/dev/sda:
          Magic : a92b4efc
        Version : 1.2
    Feature Map : 0x1
     Array UUID : 3f2a1b4c:5d6e7f80:91a2b3c4:d5e6f708
     Raid Level : raid1
"""

MDSTAT = """Personalities : [raid1] [raid6] [raid5] [raid4]
md0 : active raid1 sdb1[1] sda1[0]
      976630464 blocks super 1.2 [2/2] [UU]
      bitmap: 0/8 pages [0KB], 65536KB chunk

md127 : inactive sdc[0](S)
      3906887512 blocks super 1.2

unused devices: <none>
"""

MDSTAT_EMPTY = """Personalities :
unused devices: <none>
"""

MDADM_DETAIL_MD0 = """/dev/md0:
           Version : 1.2
     Creation Time : Mon Jan  8 10:12:44 2024
        Raid Level : raid1
        Array Size : 976630464 (931.39 GiB 1000.07 GB)
      Raid Devices : 2
             State : clean
    Active Devices : 2

    Number   Major   Minor   RaidDevice State
       0       8        1        0      active sync   /dev/sda1
       1       8       17        1      active sync   /dev/sdb1
"""

LSPCI = """0000:00:00.0 Host bridge [0600]: Intel Corporation Sky Lake-E DMI3 Registers [8086:2020] (rev 04)
0000:00:17.0 SATA controller [0106]: Intel Corporation C620 Series Chipset Family SATA Controller [AHCI mode] [8086:a182] (rev 09)
0000:03:00.0 VGA compatible controller [0300]: ASPEED Technology, Inc. ASPEED Graphics Family [1a03:2000] (rev 41)
0000:3b:00.0 3D controller [0302]: NVIDIA Corporation GA100 [A100 PCIe 40GB] [10de:20f1] (rev a1)
0000:5e:00.0 Ethernet controller [0200]: Mellanox Technologies MT2892 Family [ConnectX-6 Dx] [15b3:101d]
0000:af:00.0 Infiniband controller [0207]: Mellanox Technologies MT28908 Family [ConnectX-6] [15b3:101b]
0000:d8:00.0 Ethernet controller [0200]: Mellanox Technologies MT42822 BlueField-2 integrated ConnectX-6 Dx network controller [15b3:a2d6] (rev 01)
0000:d9:00.0 Non-Volatile memory controller [0108]: Samsung Electronics Co Ltd NVMe SSD Controller PM173X [144d:a824]
"""

NVIDIA_SMI_GPUS = "NVIDIA A100-PCIE-40GB, GPU-5f1b0c9e-1234-5678-9abc-def012345678, 00000000:3B:00.0, 1321020012345\n"

ETHTOOL_MLX = """driver: mlx5_core
version: 5.15.0-91-generic
firmware-version: 22.31.1014 (MT_0000000359)
expansion-rom-version:
bus-info: 0000:5e:00.0
"""

NVSWITCH_INVENTORY = """0, 00000000-0000-0000-0000-00000000a001, LS10, NVSwitch, 96.10.4B.00.01
1, 00000000-0000-0000-0000-00000000a002, LS10, NVSwitch, 96.10.4B.00.01
"""

NVSWITCH_LINKS = """0, 0, GPU 0, 50 GB/s, Active
0, 1, GPU 1, 50 GB/s, Active
1, 0, GPU 2, 50 GB/s, Inactive
7, 3, GPU 3, 50 GB/s, Active
"""

IP_BRIEF = """lo               UNKNOWN        127.0.0.1/8 ::1/128
ens1f0           UP             10.0.0.5/24 fe80::bace:f6ff:fe00:1/64
veth12@if5       UP             fe80::1/64
ib0              DOWN
"""
