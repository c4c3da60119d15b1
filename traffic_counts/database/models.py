from sqlalchemy import Column, Date, DateTime, Float, Integer, String, func

from .database import Base

# --- Count metadata ---

class Header(Base):
    __tablename__ = "tc_header"

    recordnum = Column(Integer, primary_key=True, autoincrement=True)
    mcd = Column(String(10), nullable=True)
    fc = Column(Integer, nullable=True)
    count_type = Column("type", Integer, nullable=True)
    bikepedgroup = Column(String(50), nullable=True)
    indir = Column(String(10), nullable=True)
    outdir = Column(String(10), nullable=True)
    cntdir = Column(String(10), nullable=True)
    counterid = Column(String(20), nullable=True)
    speedlimit = Column(Integer, nullable=True)
    status = Column(String(20), nullable=True)
    importdatadate = Column(Date, nullable=True)
    set_date = Column(Date, nullable=True)
    aadv = Column(Integer, nullable=True)

# --- Hourly pivot columns, shared by the non-normal tables ---

class HourlyVolumeColumns:
    am12 = Column(Integer)
    am1 = Column(Integer)
    am2 = Column(Integer)
    am3 = Column(Integer)
    am4 = Column(Integer)
    am5 = Column(Integer)
    am6 = Column(Integer)
    am7 = Column(Integer)
    am8 = Column(Integer)
    am9 = Column(Integer)
    am10 = Column(Integer)
    am11 = Column(Integer)
    pm12 = Column(Integer)
    pm1 = Column(Integer)
    pm2 = Column(Integer)
    pm3 = Column(Integer)
    pm4 = Column(Integer)
    pm5 = Column(Integer)
    pm6 = Column(Integer)
    pm7 = Column(Integer)
    pm8 = Column(Integer)
    pm9 = Column(Integer)
    pm10 = Column(Integer)
    pm11 = Column(Integer)

class HourlySpeedColumns:
    am12 = Column(Float)
    am1 = Column(Float)
    am2 = Column(Float)
    am3 = Column(Float)
    am4 = Column(Float)
    am5 = Column(Float)
    am6 = Column(Float)
    am7 = Column(Float)
    am8 = Column(Float)
    am9 = Column(Float)
    am10 = Column(Float)
    am11 = Column(Float)
    pm12 = Column(Float)
    pm1 = Column(Float)
    pm2 = Column(Float)
    pm3 = Column(Float)
    pm4 = Column(Float)
    pm5 = Column(Float)
    pm6 = Column(Float)
    pm7 = Column(Float)
    pm8 = Column(Float)
    pm9 = Column(Float)
    pm10 = Column(Float)
    pm11 = Column(Float)

# --- Binned counts ---

class ClassCount(Base):
    __tablename__ = "tc_clacount"

    id = Column(Integer, primary_key=True, autoincrement=True)
    recordnum = Column(Integer, nullable=False, index=True)
    countdate = Column(Date, nullable=False)
    counttime = Column(DateTime, nullable=False)
    countlane = Column(Integer, nullable=True)
    ctdir = Column(String(10), nullable=True)
    total = Column(Integer, nullable=False, default=0)
    bikes = Column(Integer, default=0)
    cars_and_tlrs = Column(Integer, default=0)
    ax2_long = Column(Integer, default=0)
    buses = Column(Integer, default=0)
    ax2_6_tire = Column(Integer, default=0)
    ax3_single = Column(Integer, default=0)
    ax4_single = Column(Integer, default=0)
    lt_5_ax_double = Column(Integer, default=0)
    ax5_double = Column(Integer, default=0)
    gt_5_ax_double = Column(Integer, default=0)
    lt_6_ax_multi = Column(Integer, default=0)
    ax6_multi = Column(Integer, default=0)
    gt_6_ax_multi = Column(Integer, default=0)
    unclassified = Column(Integer, default=0)

class SpeedCount(Base):
    __tablename__ = "tc_specount"

    id = Column(Integer, primary_key=True, autoincrement=True)
    recordnum = Column(Integer, nullable=False, index=True)
    countdate = Column(Date, nullable=False)
    counttime = Column(DateTime, nullable=False)
    countlane = Column(Integer, nullable=True)
    ctdir = Column(String(10), nullable=True)
    total = Column(Integer, nullable=False, default=0)
    s1 = Column(Integer, default=0)
    s2 = Column(Integer, default=0)
    s3 = Column(Integer, default=0)
    s4 = Column(Integer, default=0)
    s5 = Column(Integer, default=0)
    s6 = Column(Integer, default=0)
    s7 = Column(Integer, default=0)
    s8 = Column(Integer, default=0)
    s9 = Column(Integer, default=0)
    s10 = Column(Integer, default=0)
    s11 = Column(Integer, default=0)
    s12 = Column(Integer, default=0)
    s13 = Column(Integer, default=0)
    s14 = Column(Integer, default=0)

class FifteenMinuteVolumeCount(Base):
    __tablename__ = "tc_15minvolcount"

    id = Column(Integer, primary_key=True, autoincrement=True)
    recordnum = Column(Integer, nullable=False, index=True)
    countdate = Column(Date, nullable=False)
    counttime = Column(DateTime, nullable=False)
    volcount = Column(Integer, nullable=False)
    cntdir = Column(String(10), nullable=True)
    countlane = Column(Integer, nullable=True)

class BicycleCount(Base):
    __tablename__ = "tc_bikecount"

    id = Column(Integer, primary_key=True, autoincrement=True)
    dvrpcnum = Column(Integer, nullable=False, index=True)
    countdate = Column(Date, nullable=False)
    counttime = Column(DateTime, nullable=False)
    total = Column(Integer, nullable=False)
    incount = Column(Integer, nullable=True)
    outcount = Column(Integer, nullable=True)

class PedestrianCount(Base):
    __tablename__ = "tc_pedcount"

    id = Column(Integer, primary_key=True, autoincrement=True)
    dvrpcnum = Column(Integer, nullable=False, index=True)
    countdate = Column(Date, nullable=False)
    counttime = Column(DateTime, nullable=False)
    total = Column(Integer, nullable=False)
    incount = Column("IN", Integer, nullable=True)
    outcount = Column("OUT", Integer, nullable=True)

# --- Hourly pivots ---

class VolumeCount(HourlyVolumeColumns, Base):
    __tablename__ = "tc_volcount"

    id = Column(Integer, primary_key=True, autoincrement=True)
    recordnum = Column(Integer, nullable=False, index=True)
    countdate = Column(Date, nullable=False)
    setflag = Column(Integer, nullable=True)
    totalcount = Column(Integer, nullable=True)
    weather = Column(String(20), nullable=True)
    cntdir = Column(String(10), nullable=True)
    countlane = Column(Integer, nullable=True)

class SpeedSummary(HourlySpeedColumns, Base):
    __tablename__ = "tc_spesum"

    id = Column(Integer, primary_key=True, autoincrement=True)
    recordnum = Column(Integer, nullable=False, index=True)
    countdate = Column(Date, nullable=False)
    ctdir = Column(String(10), nullable=True)
    countlane = Column(Integer, nullable=True)

# --- Factors (read-only reference tables) ---

class SeasonalFactor(Base):
    __tablename__ = "tc_factor"

    id = Column(Integer, primary_key=True, autoincrement=True)
    fc = Column(Integer, nullable=False)
    year = Column(Integer, nullable=False)
    month = Column(Integer, nullable=False)
    dayofweek = Column(Integer, nullable=False)  # 1=Sunday, 7=Saturday
    pafactor = Column(Float, nullable=True)
    njfactor = Column(Float, nullable=True)
    paaxle = Column(Float, nullable=True)
    njaxle = Column(Float, nullable=True)

class BicycleFactor(Base):
    __tablename__ = "tc_bikefactor"

    id = Column(Integer, primary_key=True, autoincrement=True)
    type = Column(String(50), nullable=False)
    year = Column(Integer, nullable=False)
    monthnum = Column(Integer, nullable=False)
    dayofweeknum = Column(Integer, nullable=False)
    factor = Column(Float, nullable=False)

class PedestrianFactor(Base):
    __tablename__ = "tc_pedfactor"

    id = Column(Integer, primary_key=True, autoincrement=True)
    month = Column(Integer, nullable=False)
    factor = Column(Float, nullable=False)

class CountTypeFactor(Base):
    __tablename__ = "tc_counttype"

    counttype = Column(Integer, primary_key=True)
    factor2 = Column(Float, nullable=True)

class ExcludedDay(Base):
    __tablename__ = "aadv_excluded_days"

    id = Column(Integer, primary_key=True, autoincrement=True)
    dt = Column(Date, nullable=False, unique=True)
    name = Column(String(100), nullable=True)

# --- Results ---

class Aadv(Base):
    __tablename__ = "aadv"

    id = Column(Integer, primary_key=True, autoincrement=True)
    recordnum = Column(Integer, nullable=False, index=True)
    aadv = Column(Integer, nullable=False)
    direction = Column(String(10), nullable=True)
    date_calculated = Column(Date, nullable=False)

class ImportLogEntry(Base):
    __tablename__ = "import_log"

    id = Column(Integer, primary_key=True, autoincrement=True)
    recordnum = Column(Integer, nullable=True, index=True)
    message = Column(String(1000), nullable=False)
    log_level = Column(String(10), nullable=False)
    datetime = Column(DateTime, nullable=False, server_default=func.now())
